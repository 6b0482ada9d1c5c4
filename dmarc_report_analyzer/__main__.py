from dmarc_report_analyzer.app import cli

cli()
