from invoke import task, Context


@task
def test(ctx: Context) -> None:
    # Run linters
    ctx.run("ruff check")
    ctx.run("mypy fingerprint_pinning")

    # Run the test suite
    ctx.run("pytest")


@task
def lint(ctx: Context) -> None:
    ctx.run("ruff format .")
    ctx.run("ruff check . --fix")
    ctx.run("mypy fingerprint_pinning main.py")
