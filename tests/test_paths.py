import pytest

from wsng.paths import FsEntryKind, classify, ends_in_cgi, file_type, sanitize, split_query


@pytest.mark.parametrize("raw", ["", "/", "//", "/..", "../..", "/../../"])
def test_sanitize_root(raw):
    assert sanitize(raw) == "."


@pytest.mark.parametrize("raw, expected", [
    ("/a/../b", "b"),
    ("/a/b/../../c", "c"),
    ("/../../etc/passwd", "etc/passwd"),
    ("/docs/index.html", "docs/index.html"),
    ("/a//b/", "a/b"),
    ("/x?y=1", "x?y=1"),
])
def test_sanitize(raw, expected):
    assert sanitize(raw) == expected


@pytest.mark.parametrize("raw", [
    "/a/../../b/..", "..", "/../x/../../y/z", "a/b/c/../../../..", "/./../.", "/..a/b..",
])
def test_sanitize_no_traversal_and_idempotent(raw):
    once = sanitize(raw)
    assert ".." not in once.split("/")
    assert once
    assert sanitize(once) == once


def test_sanitize_keeps_names_that_only_contain_dots():
    assert sanitize("/..a/b../...") == "..a/b../..."


def test_split_query():
    assert split_query("/x?y=1") == ("/x", "y=1")
    assert split_query("/x") == ("/x", None)
    assert split_query("/x?") == ("/x", "")


def test_split_query_uses_last_question_mark():
    assert split_query("/x?a=1?b=2") == ("/x?a=1", "b=2")


def test_split_query_does_not_decode():
    assert split_query("/x%20y?a=%2F") == ("/x%20y", "a=%2F")


def test_file_type():
    assert file_type("a/b.html") == "html"
    assert file_type("a.d/README") == ""
    assert file_type("x.tar.gz") == "gz"
    assert ends_in_cgi("bin/run.cgi")
    assert not ends_in_cgi("run.cgi.txt")
    assert not ends_in_cgi("cgi")


def test_classify(www):
    (www / "a.txt").write_text("hi")
    (www / "run.cgi").write_text("#!/bin/sh\n")
    (www / "sub").mkdir()
    assert classify("a.txt") is FsEntryKind.REGULAR
    assert classify("run.cgi") is FsEntryKind.CGI
    assert classify("sub") is FsEntryKind.DIRECTORY
    assert classify(".") is FsEntryKind.DIRECTORY
    assert classify("nope.txt") is FsEntryKind.MISSING


def test_classify_errors_are_missing(www):
    (www / "a.txt").write_text("hi")
    # ENOTDIR and embedded NUL both fail closed
    assert classify("a.txt/b") is FsEntryKind.MISSING
    assert classify("a\0b") is FsEntryKind.MISSING


def test_classify_forbidden(www):
    secret = www / "secret.txt"
    secret.write_text("no")
    secret.chmod(0o000)
    locked = www / "locked"
    locked.mkdir()
    locked.chmod(0o600)
    assert classify("secret.txt") is FsEntryKind.FORBIDDEN
    assert classify("locked") is FsEntryKind.FORBIDDEN


def test_classify_file_without_execute_bit_is_fine(www):
    f = www / "plain.txt"
    f.write_text("x")
    f.chmod(0o644)
    assert classify("plain.txt") is FsEntryKind.REGULAR
