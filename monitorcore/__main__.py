from monitorcore.cli.main import cli

cli()
