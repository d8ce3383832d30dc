"""Top-level package for GradeBridge.

Provides subpackages:
- gradebridge.core – assignment/submission models, schemas, serialization
- gradebridge.mathtext – math-aware rich text rendering
- gradebridge.layout – deterministic page planning for the printable packet
- gradebridge.output – HTML page rendering and PDF export
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "3.0.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("gradebridge")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
