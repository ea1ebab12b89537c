from idemixgen_py.config import BASE_DIR_ENV_VAR, DEFAULT_BASE_DIR
from idemixgen_py.native.provisioning import (
    ProvisioningConfig,
    ProvisioningReport,
    ProvisioningResult,
    ca_keygen as run_ca_keygen,
    signerconfig as run_signerconfig,
    version_info,
)
from idemixgen_py.native.util.logging import logger
from result import is_err
import click

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


###
# Failure Reporting
###


def _report(result: ProvisioningResult) -> ProvisioningReport:
    """Unwrap a workflow result, or print the error and exit with status 1."""
    if is_err(result):
        error = result.unwrap_err()
        logger.debug(f"{type(error).__name__}: {error}")
        raise click.ClickException(str(error))
    return result.unwrap()


def _echo_report(report: ProvisioningReport) -> None:
    for path in report["files"]:
        click.echo(f"Created {path}")


###
# CLI
###


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="Utility for generating key material to be used with the Identity Mixer MSP.",
)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    envvar=BASE_DIR_ENV_VAR,
    default=DEFAULT_BASE_DIR,
    show_default=True,
    help="Directory in which the ca and msp directories are created.",
)
@click.pass_context
def cli(ctx: click.Context, base_dir: str) -> None:
    ctx.ensure_object(dict)
    ctx.obj["BASE_DIR"] = base_dir


@cli.command("ca-keygen", help="Generate CA key material.")
@click.pass_context
def ca_keygen(ctx: click.Context) -> None:
    config = ProvisioningConfig(base_dir=ctx.obj["BASE_DIR"])
    _echo_report(_report(run_ca_keygen(config)))


@cli.command("signerconfig", help="Generate a default signer for this Idemix MSP.")
@click.option(
    "-u",
    "--org-unit",
    type=str,
    default="",
    help="The Organizational Unit of the default signer.",
)
@click.option("-a", "--admin", is_flag=True, help="Make the default signer admin.")
@click.pass_context
def signerconfig(ctx: click.Context, org_unit: str, admin: bool) -> None:
    config = ProvisioningConfig(
        base_dir=ctx.obj["BASE_DIR"], org_unit=org_unit, is_admin=admin
    )
    _echo_report(_report(run_signerconfig(config)))


@cli.command("version", help="Show version information.")
def version() -> None:
    click.echo(version_info())


if __name__ == "__main__":
    cli()
