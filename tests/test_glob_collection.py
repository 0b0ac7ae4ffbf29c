import pytest

from doot import log
from doot.glob_collection import GlobCollection, GlobSyntaxError, compile_glob
from doot.paths import RelativePath


@pytest.fixture(autouse=True)
def reset_log():
    log.init(verbose=False, quiet=False)
    yield
    log.init(verbose=False, quiet=False)


def test_valid_patterns_are_counted():
    assert len(GlobCollection(["file1", "*.txt"])) == 2
    assert len(GlobCollection(["**/.*", "file1"])) == 2
    assert len(GlobCollection([])) == 0


def test_invalid_pattern_is_ignored(capsys):
    collection = GlobCollection(["file2", "*["])
    assert len(collection) == 1
    assert "Ignoring invalid glob pattern '*['" in capsys.readouterr().err


@pytest.mark.parametrize("pattern", ["*[", "{a,b", "[a-", "[!", "[a-bc]"])
def test_compile_glob_rejects_bad_syntax(pattern):
    with pytest.raises(GlobSyntaxError):
        compile_glob(pattern, "/")


def test_star_does_not_cross_separator():
    collection = GlobCollection(["secret*"])
    assert collection.matches(RelativePath("secret2.doot-crypt"))
    assert collection.matches(RelativePath("secret-dir2.doot-crypt.d"))
    assert not collection.matches(RelativePath("secret-dir2.doot-crypt.d/nested.doot-crypt/file6"))


def test_extension_glob():
    collection = GlobCollection(["*.txt", "**/file6"])
    assert collection.matches("secret1.doot-crypt.txt")
    assert not collection.matches("secret2.doot-crypt")
    assert collection.matches("secret-dir2.doot-crypt.d/nested.doot-crypt/file6")


def test_directory_contents_glob():
    excludes = GlobCollection(["secret*/**"])
    assert excludes.matches("secret-dir1.doot-crypt/file5")
    assert not excludes.matches("secret-dir1.doot-crypt")
    includes = GlobCollection(["secret*/nested.doot-crypt", "**/file6"])
    assert includes.matches("secret-dir2.doot-crypt.d/nested.doot-crypt")
    assert includes.matches("secret-dir2.doot-crypt.d/nested.doot-crypt/file6")
    assert not includes.matches("secret-dir2.doot-crypt.d/nested.doot-crypt/file7.doot-crypt")


def test_trailing_super_glob_includes_children():
    collection = GlobCollection(["secret*/nested.doot-crypt**"])
    assert collection.matches("secret-dir2.doot-crypt.d/nested.doot-crypt/file6")
    assert collection.matches("secret-dir2.doot-crypt.d/nested.doot-crypt/file7.doot-crypt")
    assert not collection.matches("secret-dir1.doot-crypt/file5")


def test_super_glob_matches_zero_depth():
    excludes = GlobCollection(["**/file2", ".hiddenDir/**/file4", "dir1/nestedDir/**"])
    assert not excludes.matches("file1")
    assert excludes.matches("file2")
    assert excludes.matches(".hiddenDir/file4")
    assert not excludes.matches(".hiddenDir/.nestedHiddenFile2")
    assert excludes.matches("dir1/nestedDir/.nestedHiddenFile1")
    includes = GlobCollection(["dir1/nestedDir/**/file3"])
    assert includes.matches("dir1/nestedDir/file3")


def test_hidden_files_glob():
    collection = GlobCollection(["**/.*"])
    assert collection.matches(".hiddenFile")
    assert collection.matches("dir1/nestedDir/.nestedHiddenFile1")
    assert collection.matches(".hiddenDir")
    assert not collection.matches("file1")
    assert not collection.matches(".hiddenDir/file4")


def test_unicode_with_single_char_wildcard():
    collection = GlobCollection([".hiddenDir/dïrWìthÜnicóde/1?5helloö"])
    assert collection.matches(".hiddenDir/dïrWìthÜnicóde/155helloö")
    assert not collection.matches(".hiddenDir/dïrWìthÜnicóde/1/5helloö")


def test_exact_names_and_directories():
    collection = GlobCollection(["dir1", "dir1/nestedDir"])
    assert collection.matches("dir1")
    assert collection.matches("dir1/nestedDir")
    assert not collection.matches("dir1/nestedDir/file3")


def test_character_classes_and_alternatives():
    pattern = compile_glob("f[a-c][!x]{one,two}", "/")
    assert pattern.fullmatch("fbyone")
    assert pattern.fullmatch("fazdtwo") is None
    assert pattern.fullmatch("fbxone") is None
    assert pattern.fullmatch("fdytwo") is None


def test_escaped_wildcard_is_literal():
    pattern = compile_glob("a\\*b", "/")
    assert pattern.fullmatch("a*b")
    assert pattern.fullmatch("axb") is None


def test_question_mark_does_not_match_separator():
    pattern = compile_glob("a?b", "/")
    assert pattern.fullmatch("axb")
    assert pattern.fullmatch("a/b") is None