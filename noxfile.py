import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

# Packages with C extensions that must be rebuilt per Python version.
_C_EXT_PACKAGES = ["psycopg2"]


def _install(session: nox.Session) -> None:
    """Install the project with the test extra into the nox virtualenv."""
    session.install("-e", ".[test]")
    # Force-rebuild C-extension packages so the .so matches this Python version.
    session.run(
        "pip",
        "install",
        "--force-reinstall",
        "--no-cache-dir",
        *_C_EXT_PACKAGES,
    )


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest")


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run(
        "pytest",
        "tests/inventory/domain/",
        "tests/payments/domain/",
        "tests/delivery/domain/",
        "tests/webhooks/domain/",
        "tests/ordering/domain/",
        "tests/notifications/domain/",
        "tests/shared/",
    )


@nox.session(python=PYTHON_VERSIONS)
def tests_saga(session: nox.Session) -> None:
    """Run the end-to-end saga scenarios."""
    _install(session)
    session.run("pytest", "tests/saga/")
