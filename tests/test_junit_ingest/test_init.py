"""Test module for junit_ingest package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import junit_ingest

    # Assert
    assert junit_ingest is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import junit_ingest

    # Assert
    assert isinstance(junit_ingest.__version__, str)
    assert junit_ingest.__version__ == "0.1.0"


def test_package_exports_pipeline_stages() -> None:
    """Test that every pipeline stage is reachable from the package root."""
    # Arrange & Act
    import junit_ingest

    # Assert
    for name in ("ingest", "parse", "extract_content", "map_suites", "aggregate"):
        assert name in junit_ingest.__all__
        assert callable(getattr(junit_ingest, name))


def test_package_all_exports_resolve() -> None:
    """Test that __all__ only names attributes that exist."""
    # Arrange & Act
    import junit_ingest

    # Assert
    missing = [name for name in junit_ingest.__all__ if not hasattr(junit_ingest, name)]
    assert missing == []
