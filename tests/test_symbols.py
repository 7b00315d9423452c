from crudslice.model import ClassHandle, ClassKind
from crudslice.symbols import SymbolTable


def test_resolve_by_simple_and_qualified_name():
    table = SymbolTable([
        ClassHandle("Mapper", "org.mapstruct", ClassKind.INTERFACE),
        ClassHandle("Mapper", "com.acme.common", ClassKind.CLASS),
    ])
    assert table.resolve("Mapper") is not None
    assert table.resolve("com.acme.common.Mapper").package == "com.acme.common"
    assert table.resolve("org.mapstruct.Mapper").kind == ClassKind.INTERFACE
    assert table.resolve("com.other.Mapper") is None


def test_resolve_with_predicate():
    table = SymbolTable([
        ClassHandle("EntityMapper", "a", ClassKind.CLASS),
        ClassHandle("EntityMapper", "b", ClassKind.INTERFACE),
    ])
    found = table.resolve("EntityMapper", lambda h: h.kind == ClassKind.INTERFACE)
    assert found.package == "b"
    assert table.resolve("EntityMapper", lambda h: h.kind == ClassKind.ENUM) is None


def test_blank_names_resolve_to_nothing():
    table = SymbolTable([ClassHandle("X", "a")])
    assert table.resolve("") is None
    assert table.resolve("   ") is None


def test_register_replaces_same_package():
    table = SymbolTable()
    table.register(ClassHandle("OrderDTO", "a", methods=("old",)))
    table.register(ClassHandle("OrderDTO", "a", methods=("new",)))
    table.register(ClassHandle("OrderDTO", "b"))
    assert len(table) == 2
    assert table.resolve("a.OrderDTO").methods == ("new",)
    assert "OrderDTO" in table
    assert "Missing" not in table


def test_register_source_returns_handles():
    table = SymbolTable()
    handles = table.register_source("package p;\npublic class A { class B {} }\n", "p/A.java")
    assert [h.name for h in handles] == ["A", "B"]
    assert table.resolve("p.B").path == "p/A.java"


def test_scan_skips_broken_files_and_build_dirs(tmp_path):
    src = tmp_path / "src" / "main" / "java" / "p"
    src.mkdir(parents=True)
    (src / "Good.java").write_text("package p;\npublic class Good {}\n", encoding="utf-8")
    (src / "Broken.java").write_text("package p;\npublic class {\n", encoding="utf-8")
    target = tmp_path / "target" / "p"
    target.mkdir(parents=True)
    (target / "Built.java").write_text("package p;\npublic class Built {}\n", encoding="utf-8")

    table = SymbolTable()
    assert table.scan(tmp_path) == 1
    good = table.resolve("p.Good")
    assert good.path == "src/main/java/p/Good.java"
    assert table.resolve("Built") is None
