"""Nox sessions for django-doubles."""

import sys

import nox

# Keep the first entry in step with the django floor in pyproject.toml
DJANGO_VERSIONS = ["4.2", "5.2", "6.0"]
PYTHON_STABLE_VERSION = "3.14"
# 3.11 is the floor for BaseException.add_note
PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]
PACKAGE = "django_doubles"

nox.options.default_venv_backend = "uv"
nox.options.sessions = ["pre-commit", "pip-audit", "tests"]


@nox.session(name="pre-commit", python=PYTHON_STABLE_VERSION)
def precommit(session: nox.Session) -> None:
    """Run pre-commit hooks on all files."""
    session.install("pre-commit")
    session.run("pre-commit", "run", "--all-files")


@nox.session(name="pip-audit", python=PYTHON_STABLE_VERSION)
def pip_audit(session: nox.Session) -> None:
    """Scan dependencies for known vulnerabilities."""
    pyproject = nox.project.load_toml("pyproject.toml")
    deps = nox.project.dependency_groups(pyproject, "dev")
    session.install(".", *deps)
    session.install("pip-audit")
    session.run("pip-audit")


@nox.session(
    python=PYTHON_VERSIONS,
    tags=["tests"],
)
@nox.parametrize("django", DJANGO_VERSIONS)
def tests(session: nox.Session, django: str) -> None:
    """Run the test suite across Python and Django versions."""
    # Django 4.2 supports only Python 3.11-3.12
    if django == "4.2" and session.python in ("3.13", "3.14"):
        session.skip("Django 4.2 supports only Python 3.11-3.12")
    # Django 6.0 requires Python 3.12+
    if django == "6.0" and session.python == "3.11":
        session.skip("Django 6.0 requires Python 3.12+")

    pyproject = nox.project.load_toml("pyproject.toml")
    deps = nox.project.dependency_groups(pyproject, "dev")
    session.install(".", *deps)
    session.install(f"django~={django}.0")
    session.run(
        "coverage",
        "run",
        "-m",
        "pytest",
        "-vv",
        *session.posargs,
    )

    if sys.stdin.isatty():
        session.notify("coverage")


@nox.session(python=PYTHON_STABLE_VERSION)
def coverage(session: nox.Session) -> None:
    """Combine and report coverage."""
    session.install("coverage[toml]")
    session.run("coverage", "combine", success_codes=[0, 1])
    session.run("coverage", "report", f"--include=*/{PACKAGE}/*")
