"""Tests for services.archive_processing.archive_extractor."""

import zipfile

import pytest

from core.exceptions import ArchiveError
from services.archive_processing.archive_extractor import ArchiveExtractor


@pytest.fixture
def extractor():
    return ArchiveExtractor()


def write_archive(path, data):
    path.write_bytes(data)
    return path


def test_text_members_are_concatenated_in_stored_order(tmp_path, extractor, make_zip):
    archive = write_archive(tmp_path / "src.zip", make_zip([
        ("b.txt", b"sub2.acme.com\n"),
        ("a.txt", b"sub1.acme.com\n"),
        ("nested/c.txt", b"sub3.acme.com"),
    ]))

    output = extractor.extract(archive, tmp_path / "acme")

    assert output == tmp_path / "acme" / "consolidated.txt"
    assert output.read_bytes() == b"sub2.acme.com\nsub1.acme.com\nsub3.acme.com"


def test_no_separator_is_inserted_between_members(tmp_path, extractor, make_zip):
    archive = write_archive(tmp_path / "src.zip", make_zip([("a.txt", b"one"), ("b.txt", b"two")]))

    output = extractor.extract(archive, tmp_path / "out")

    assert output.read_bytes() == b"onetwo"


def test_directories_and_non_text_members_are_skipped(tmp_path, extractor, make_zip):
    archive = write_archive(tmp_path / "src.zip", make_zip([
        ("docs/", b""),
        ("docs/readme.md", b"# readme\n"),
        ("data.json", b"{}"),
        ("docs/hosts.txt", b"a.example.com\n"),
        ("LIST.TXT", b"b.example.com\n"),
    ]))

    output = extractor.extract(archive, tmp_path / "out")

    assert output.read_bytes() == b"a.example.com\nb.example.com\n"


def test_custom_extensions(tmp_path, make_zip):
    archive = write_archive(tmp_path / "src.zip", make_zip([("a.txt", b"a\n"), ("b.lst", b"b\n")]))

    output = ArchiveExtractor(text_extensions=(".lst",)).extract(archive, tmp_path / "out")

    assert output.read_bytes() == b"b\n"


def test_archive_without_text_members_yields_empty_file(tmp_path, extractor, make_zip):
    archive = write_archive(tmp_path / "src.zip", make_zip([("image.png", b"\x89PNG")]))

    output = extractor.extract(archive, tmp_path / "out")

    assert output.read_bytes() == b""


def test_reextraction_truncates_previous_content(tmp_path, extractor, make_zip):
    dest = tmp_path / "acme"
    first = write_archive(tmp_path / "first.zip", make_zip([("a.txt", b"old-line-that-is-long\n" * 50)]))
    second = write_archive(tmp_path / "second.zip", make_zip([("a.txt", b"new\n")]))

    extractor.extract(first, dest)
    output = extractor.extract(second, dest)

    assert output.read_bytes() == b"new\n"
    assert sorted(p.name for p in dest.iterdir()) == ["consolidated.txt"]


def test_unreadable_archive_is_an_archive_error(tmp_path, extractor):
    archive = write_archive(tmp_path / "broken.zip", b"this is not a zip file")

    with pytest.raises(ArchiveError):
        extractor.extract(archive, tmp_path / "out")

    assert not (tmp_path / "out" / "consolidated.txt").exists()


def test_missing_archive_is_an_archive_error(tmp_path, extractor):
    with pytest.raises(ArchiveError):
        extractor.extract(tmp_path / "missing.zip", tmp_path / "out")


def test_corrupt_member_aborts_and_leaves_no_output(tmp_path, extractor, make_zip):
    dest = tmp_path / "acme"
    good = write_archive(tmp_path / "good.zip", make_zip([("a.txt", b"previous\n")]))
    extractor.extract(good, dest)

    payload = b"A" * 200
    data = make_zip([("first.txt", b"fine\n"), ("second.txt", payload)], compression=zipfile.ZIP_STORED)
    corrupt = write_archive(tmp_path / "corrupt.zip", data.replace(payload, b"B" * 200))

    with pytest.raises(ArchiveError):
        extractor.extract(corrupt, dest)

    assert list(dest.iterdir()) == []


def test_extractor_never_deletes_source_archive(tmp_path, extractor, make_zip):
    archive = write_archive(tmp_path / "src.zip", make_zip([("a.txt", b"x\n")]))

    extractor.extract(archive, tmp_path / "out")

    assert archive.exists()
