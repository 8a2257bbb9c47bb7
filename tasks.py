from invoke import task


@task
def lint(c):
    c.run("ruff check .")


@task
def format_check(c):
    c.run("ruff format --check .")


@task
def test(c):
    c.run("pytest")


@task
def rank_example(c):
    """Import the example reviews and print both leaderboards."""
    c.run("subrank import config.example.yaml examples/reviews.jsonl")
    c.run("subrank rank config.example.yaml -s lincoln-elem -s roosevelt-middle")
    c.run("subrank rank config.example.yaml -s lincoln-elem -s roosevelt-middle --by-city")


@task
def ci(c):
    lint(c)
    format_check(c)
    test(c)
