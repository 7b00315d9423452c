import json

import pytest

from conftest import NOTE_SOURCE, ORDER_SOURCE, PLAIN_SOURCE
from crudslice.cli import build_parser, main, strip_quotes, virtual_path
from crudslice.config import CONFIG_FILE_NAME
from crudslice.sink import manifest_path

ENTITY_PKG = "src/main/java/com/acme/shop/domain/entity"
SHOP = "src/main/java/com/acme/shop"


@pytest.fixture()
def project(tmp_path):
    (tmp_path / ENTITY_PKG).mkdir(parents=True)
    (tmp_path / "src/main/resources").mkdir(parents=True)
    return tmp_path


def write_entity(project, name, source):
    path = project / ENTITY_PKG / f"{name}.java"
    path.write_text(source, encoding="utf-8")
    return path


def test_strip_quotes():
    assert strip_quotes(' "C:/work/shop" ') == "C:/work/shop"
    assert strip_quotes("'a'") == "a"
    assert strip_quotes('"a') == '"a'


def test_virtual_path(tmp_path):
    assert virtual_path(tmp_path / "src" / "main", tmp_path.resolve()) == "src/main"
    assert virtual_path(tmp_path, tmp_path.resolve()) == ""


def test_generate_writes_the_slice(project):
    entity = write_entity(project, "OrderEntity", ORDER_SOURCE)
    assert main(["generate", str(entity), "--root", str(project)]) == 0

    assert (project / f"{SHOP}/domain/repository/OrderRepository.java").is_file()
    assert (project / f"{SHOP}/service/dto/OrderDTO.java").is_file()
    assert (project / f"{SHOP}/service/OrderService.java").is_file()
    assert (project / f"{SHOP}/controller/OrderController.java").is_file()
    xml = (project / "src/main/resources/mappers/OrderDao.xml").read_text(encoding="utf-8")
    assert 'namespace="com.acme.shop.domain.dao.OrderDao"' in xml

    assert (project / CONFIG_FILE_NAME).is_file()
    manifest = json.loads(manifest_path(project).read_text(encoding="utf-8"))
    assert f"{SHOP}/service/OrderService.java" in manifest


def test_generate_twice_keeps_files(project):
    entity = write_entity(project, "OrderEntity", ORDER_SOURCE)
    service = project / f"{SHOP}/service/OrderService.java"
    assert main(["generate", str(entity), "--root", str(project)]) == 0
    service.write_text("// edited by hand\n", encoding="utf-8")
    assert main(["generate", str(entity), "--root", str(project)]) == 0
    assert service.read_text(encoding="utf-8") == "// edited by hand\n"


def test_generate_reads_the_project_config(project):
    (project / CONFIG_FILE_NAME).write_text("service.interface=true\nui.enable=true\n", encoding="utf-8")
    entity = write_entity(project, "NoteEntity", NOTE_SOURCE)
    assert main(["generate", str(entity), "--root", str(project)]) == 0
    impl = project / f"{SHOP}/service/impl/NoteServiceImpl.java"
    assert "implements NoteService" in impl.read_text(encoding="utf-8")
    assert (project / "ui/views/note.vue").is_file()


def test_dry_run_writes_nothing(project):
    entity = write_entity(project, "OrderEntity", ORDER_SOURCE)
    assert main(["generate", str(entity), "--root", str(project), "--dry-run"]) == 0
    assert not (project / f"{SHOP}/service").exists()
    assert not manifest_path(project).exists()


def test_generate_skips_plain_classes(project, capsys):
    entity = write_entity(project, "Customer", PLAIN_SOURCE)
    assert main(["generate", str(entity), "--root", str(project)]) == 0
    assert "[WARN]" in capsys.readouterr().out
    assert not (project / f"{SHOP}/service").exists()


def test_generate_reports_bad_input(project, tmp_path_factory, capsys):
    assert main(["generate", str(project / "Missing.java"), "--root", str(project)]) == 2
    assert "[ERROR] File not found" in capsys.readouterr().out

    outside = tmp_path_factory.mktemp("elsewhere") / "OrderEntity.java"
    outside.write_text(ORDER_SOURCE, encoding="utf-8")
    assert main(["generate", str(outside), "--root", str(project)]) == 2

    broken = write_entity(project, "Broken", "public class Broken {")
    assert main(["generate", str(broken), "--root", str(project)]) == 2

    assert main(["generate", str(broken), "--root", str(project / "nope")]) == 2


def test_annotate_command(project):
    path = write_entity(project, "Customer", PLAIN_SOURCE)
    assert main(["annotate", str(path), "--dry-run"]) == 0
    assert path.read_text(encoding="utf-8") == PLAIN_SOURCE
    assert main(["annotate", str(path)]) == 0
    assert "@Entity" in path.read_text(encoding="utf-8")
    assert main(["annotate", str(project / "Missing.java")]) == 2


def test_init_config(tmp_path):
    assert main(["init-config", "--root", str(tmp_path)]) == 0
    text = (tmp_path / CONFIG_FILE_NAME).read_text(encoding="utf-8")
    assert "common.func.excel=false" in text
    assert main(["init-config", "--root", str(tmp_path)]) == 0
    assert (tmp_path / CONFIG_FILE_NAME).read_text(encoding="utf-8") == text


def test_parser():
    args = build_parser().parse_args(["generate", "A.java", "--verbose"])
    assert args.verbose and args.entity_file == "A.java" and not args.dry_run
    assert main([]) == 2
