import base64
import hashlib
import string

import pytest

from hashdrop_backend.app.naming import (
    derive_name,
    file_extension,
    random_prefix,
    safe_basename,
    strip_chars,
)


@pytest.mark.parametrize("length", [0, 1, 24, 100])
def test_random_prefix_length_and_alphabet(length):
    value = random_prefix(length)
    assert len(value) == length
    assert set(value) <= set(string.ascii_letters)


def test_random_prefix_rejects_negative_length():
    with pytest.raises(ValueError):
        random_prefix(-1)


def test_strip_chars():
    assert strip_chars("lIO0-abc", "lIO0-") == "abc"
    assert strip_chars("abc", "") == "abc"


def test_derive_name_for_hello_pdf():
    digest = hashlib.sha256(b"hello").digest()
    encoded = base64.urlsafe_b64encode(digest).decode().rstrip("=")
    stem = "".join(c for c in encoded if c not in "lIO0-")[:6]

    name = derive_name(digest, ".pdf", 6, "lIO0-")

    assert name == stem + ".pdf"
    assert not set("lIO0-") & set(name[:-4])


def test_derive_name_keeps_empty_extension():
    digest = hashlib.sha256(b"x").digest()
    assert len(derive_name(digest, "", 6, "")) == 6


def test_derive_name_may_be_shorter_than_requested():
    digest = hashlib.md5(b"x").digest()
    name = derive_name(digest, ".txt", 1000, "")
    # 16 bytes -> 22 unpadded base64 chars
    assert name.endswith(".txt")
    assert len(name) == 22 + 4


@pytest.mark.parametrize("filename, ext", [
    ("report.pdf", ".pdf"),
    ("README", ""),
    ("archive.tar.gz", ".gz"),
    ("dir/photo.JPG", ".JPG"),
    ("C:\\Users\\me\\notes.txt", ".txt"),
])
def test_file_extension(filename, ext):
    assert file_extension(filename) == ext


def test_safe_basename_drops_directories():
    assert safe_basename("../../etc/passwd") == "passwd"
    assert safe_basename("..\\..\\boot.ini") == "boot.ini"
