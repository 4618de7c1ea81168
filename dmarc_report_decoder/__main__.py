from dmarc_report_decoder.app import run

run()
