from wallboard.cli_runner import run

run()
