from spawner.cli import cli

cli(prog_name="spawner")
