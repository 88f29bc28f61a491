# type: ignore
import os

from invoke import task

DOCKER_IMAGE = "switchwatch"


@task
def venv(ctx):
    """Create .venv with switchwatch and its test and dev extras."""
    ctx.run("uv sync --all-extras")
    print("switchwatch environment ready, run `invoke test` next")


@task
def clean(ctx):
    """Delete build output, caches and coverage data after a dry-run listing."""
    ctx.run("git clean -nfdx")

    response = input("Delete the files listed above? (y/n) [n]: ").strip().lower()
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """Run ruff on src and tests, then mypy on the package."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run the test suite with coverage of src/switchwatch."""
    ctx.run("pytest --cov=switchwatch --cov-report=term-missing", pty=True)


@task
def build_package(ctx):
    """Build the sdist and wheel into dist/."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")


@task
def docker(ctx, repository="", tag=None):
    """Build the Docker image, tagged with the package version and architecture."""
    if tag is None:
        version = ctx.run("uv version --short", hide=True).stdout.strip()
        arch = ctx.run("uname -m", hide=True).stdout.strip()
        tag = f"{version}_{arch}"
    name = f"{repository}/{DOCKER_IMAGE}" if repository else DOCKER_IMAGE
    ctx.run(f"docker build . --tag {name}:{tag}", pty=True)


@task
def release(ctx):
    """Build switchwatch and upload it to PyPI with $PYPI_TOKEN."""
    token = os.getenv("PYPI_TOKEN")
    if not token:
        raise ValueError("PYPI_TOKEN environment variable is not set")

    print("Building switchwatch...")
    ctx.run("invoke build-package")

    print("Publishing to PyPI...")
    ctx.run(f"uv publish --token {token}")
