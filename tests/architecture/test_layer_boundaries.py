"""
Layer boundary contract.

1. access_review_kernel/** may NOT import access_review_config.  The kernel
   never depends upward; configuration is turned into kernel inputs by
   access_review_config.bridges.

2. access_review_kernel/domain/** is pure: no SQLAlchemy, no openpyxl, no
   YAML and no imports from db/, models/, stores/ or services/.

3. access_review_kernel/stores/** may not import services/.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(encoding="utf-8"), filename=str(filepath))
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


class TestKernelNoUpwardDependencies:
    def test_kernel_does_not_import_config(self):
        violations = _violations("access_review_kernel", ("access_review_config",))
        assert not violations, (
            "Kernel boundary violation:\n" + "\n".join(violations)
        )


class TestDomainPurity:
    FORBIDDEN = (
        "sqlalchemy",
        "openpyxl",
        "yaml",
        "access_review_kernel.db",
        "access_review_kernel.models",
        "access_review_kernel.stores",
        "access_review_kernel.services",
    )

    def test_domain_has_no_io_imports(self):
        violations = _violations("access_review_kernel/domain", self.FORBIDDEN)
        assert not violations, (
            "Domain purity violation:\n" + "\n".join(violations)
        )

    def test_domain_files_found(self):
        assert len(_python_files("access_review_kernel/domain")) >= 8


class TestStoresBelowServices:
    def test_stores_do_not_import_services(self):
        violations = _violations("access_review_kernel/stores", ("access_review_kernel.services",))
        assert not violations, "\n".join(violations)
