import json

import pytest

from crudslice.errors import SinkError
from crudslice.sink import DiskSink, MemorySink, manifest_path, sha256_text


def test_memory_sink_never_overwrites():
    sink = MemorySink()
    first = sink.create_or_get_file("a/b", "OrderDTO.java", "class OrderDTO {}")
    second = sink.create_or_get_file("a/b", "OrderDTO.java", "class Other {}")
    assert first.created and not second.created
    assert second.path == first.path == "a/b/OrderDTO.java"
    assert second.content == first.content == "class OrderDTO {}\n"
    assert list(sink.files) == ["a/b/OrderDTO.java"]


def test_memory_sink_directories():
    sink = MemorySink({"src/x/A.java": "class A {}"})
    assert sink.is_dir("src/x")
    assert sink.find_subdirectory("src", "y") is None
    assert sink.create_or_get_subdirectory("src", "y") == "src/y"
    assert sink.create_or_get_subdirectory("src", "y") == "src/y"
    assert sink.find_subdirectory("src", "y") == "src/y"


def test_disk_sink_writes_and_records_manifest(tmp_path):
    sink = DiskSink(tmp_path)
    fh = sink.create_or_get_file("src/p", "A.java", "class A {}")
    assert fh.created
    assert (tmp_path / "src/p/A.java").read_text(encoding="utf-8") == "class A {}\n"
    sink.save_manifest()
    manifest = json.loads(manifest_path(tmp_path).read_text(encoding="utf-8"))
    assert manifest == {"src/p/A.java": sha256_text("class A {}\n")}


def test_disk_sink_keeps_existing_files(tmp_path):
    target = tmp_path / "src" / "A.java"
    target.parent.mkdir(parents=True)
    target.write_text("// hand edited\n", encoding="utf-8")
    fh = DiskSink(tmp_path).create_or_get_file("src", "A.java", "class A {}")
    assert not fh.created
    assert fh.content == "// hand edited\n"
    assert target.read_text(encoding="utf-8") == "// hand edited\n"


def test_disk_sink_dry_run_writes_nothing(tmp_path):
    sink = DiskSink(tmp_path, dry_run=True)
    directory = sink.create_or_get_subdirectory("src", "p")
    fh = sink.create_or_get_file(directory, "A.java", "class A {}")
    assert fh.created
    assert sink.is_dir("src/p")
    assert sink.read_file("src/p/A.java") == "class A {}\n"
    assert not (tmp_path / "src").exists()
    sink.save_manifest()
    assert not manifest_path(tmp_path).exists()


def test_disk_sink_directory_failure(tmp_path):
    (tmp_path / "blocker").write_text("not a directory", encoding="utf-8")
    with pytest.raises(SinkError):
        DiskSink(tmp_path).create_or_get_subdirectory("blocker", "child")
