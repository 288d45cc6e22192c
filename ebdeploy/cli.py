"""
Command line entrypoint: deploy the current directory.
"""

import json
import logging
import os
import sys

import click

from .errors import EbDeployError
from .orchestrator import deploy

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # keep botocore's wire-level debug output out of -v
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.command()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and per-file progress")
@click.option("--json", "output_json", is_flag=True, help="Output machine-readable JSON")
def main(verbose: bool, output_json: bool):
    """
    Zip the files listed in deploy.json, upload them to S3 and deploy the
    result to AWS Elastic Beanstalk.
    """
    _configure_logging(verbose)

    progress = None
    if verbose:
        def progress(archive_path: str) -> None:
            logger.debug(f"  adding {archive_path}")

    try:
        result = deploy(os.getcwd(), progress=progress)
    except EbDeployError as e:
        logger.error(f"Deployment error: {e.message}")
        if output_json:
            click.echo(json.dumps({"status": "FAILED", "error": e.message, **e.details}))
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Deployment error: {e}")
        if output_json:
            click.echo(json.dumps({"status": "FAILED", "error": str(e)}))
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(result.to_dict()))
    logger.info(
        f"Deployed {result.descriptor.build_version} to AWS Elastic Beanstalk "
        f"environment {result.descriptor.config.environment_name}"
    )
    sys.exit(0)


if __name__ == "__main__":
    main()
