"""Nox sessions."""

import os
import sys
from pathlib import Path
from textwrap import dedent

try:
    import nox
    from nox import Session
    from nox import session
except ImportError:
    message = f"""\
    Nox failed to import.

    Please install it using the following command:

    {sys.executable} -m pip install nox"""
    raise SystemExit(dedent(message)) from None

package = "mdio_variable"
python_versions = ["3.13", "3.12", "3.11"]
nox.needs_version = ">=2025.2.9"
nox.options.sessions = ("pre-commit", "mypy", "tests", "xdoctest")


@session(name="pre-commit", python=python_versions[0])
def precommit(session: Session) -> None:
    """Lint using pre-commit."""
    args = session.posargs or ["run", "--all-files", "--hook-stage=manual", "--show-diff-on-failure"]
    session.install("ruff", "pre-commit", "pre-commit-hooks")
    session.run("pre-commit", *args)


@session(python=python_versions)
def mypy(session: Session) -> None:
    """Type-check using mypy."""
    args = session.posargs or ["src", "tests"]
    session.install(".[test]", "mypy")
    session.run("mypy", *args)
    if not session.posargs:
        session.run("mypy", f"--python-executable={sys.executable}", "noxfile.py")


@session(python=python_versions)
def tests(session: Session) -> None:
    """Run the test suite."""
    session.install(".[test]", "pygments")

    try:
        session.run("coverage", "run", "--parallel", "-m", "pytest", *session.posargs)
    finally:
        if session.interactive:
            session.notify("coverage", posargs=[])


@session(python=python_versions[0])
def coverage(session: Session) -> None:
    """Produce the coverage report."""
    args = session.posargs or ["report"]

    session.install("coverage[toml]")

    if not session.posargs and any(Path().glob(".coverage.*")):
        session.run("coverage", "combine")

    session.run("coverage", *args)


@session(python=python_versions)
def xdoctest(session: Session) -> None:
    """Run examples with xdoctest."""
    if session.posargs:
        args = [package, *session.posargs]
    else:
        args = [f"--modname={package}", "--command=all"]
        if "FORCE_COLOR" in os.environ:
            args.append("--colored=1")

    session.install(".", "xdoctest[colors]")
    session.run("python", "-m", "xdoctest", *args)
