"""Test module for xml_pathfinder package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import xml_pathfinder

    # Assert
    assert xml_pathfinder is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    import xml_pathfinder

    assert isinstance(xml_pathfinder.__version__, str)
    assert xml_pathfinder.__version__ == "0.1.0"


def test_package_exports_boundary_operations() -> None:
    """Test that the four boundary operations are exported at top level."""
    import xml_pathfinder

    for name in ("resolve_path_at", "extract_by_path", "get_unique_keys", "search"):
        assert name in xml_pathfinder.__all__
        assert callable(getattr(xml_pathfinder, name))


def test_top_level_scenario() -> None:
    """Test the top-level functions end to end on one document."""
    from xml_pathfinder import extract_by_path, resolve_path_at, search

    raw = "<A><B>1</B><B>2</B></A>"

    assert extract_by_path(raw, ["A", "B"]) == [{"Value": "1"}, {"Value": "2"}]
    assert resolve_path_at(raw, raw.index("2")) == ["A", "B"]
    assert search(raw, "B>") == []
