import argparse
import logging
import os

from . import core


def run() -> None:
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    logger = logging.getLogger(__name__)

    opts = core.CommandOpts(None, None, None, None, "json")

    argparser = argparse.ArgumentParser(description="CloudWatch alarms for SQS queues as CloudFormation resources")
    argparser.add_argument("-c", "--config-file")
    argparser.add_argument("-t", "--template-file", help="template to merge the alarms into")
    argparser.add_argument("-s", "--stage")
    argparser.add_argument("-r", "--region")
    argparser.add_argument("-o", "--output-format", choices=["json", "yaml"], dest="output_format")
    args = argparser.parse_args(namespace=opts)

    logger.debug("commandline opts:%s", opts)

    core.main(args)


if __name__ == "__main__":
    run()
