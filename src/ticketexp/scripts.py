# filename : scripts.py
# created  : 06/23/2025


import logging
from datetime import datetime

import click

from ticketexp.core.smartcard.logging import setup_logging

lg = logging.getLogger(__name__)


def _parse_aid(ctx, param, value):
    """AID as printed (MSB first), returned in wire order."""
    if value is None:
        return None
    try:
        aid = bytes.fromhex(value.replace(" ", "").replace(":", ""))
    except ValueError:
        raise click.BadParameter(f"not hex: '{value}'")
    if len(aid) != 3:
        raise click.BadParameter(f"AID must be 3 bytes, got {len(aid)}")
    return aid[::-1]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="TRACE level (show raw APDUs).")
@click.option("-d", "--debug", is_flag=True, help="DEBUG level (show every decode step).")
def ticketexp(verbose, debug):
    """Read ATH.ENA DESFire transit cards."""
    setup_logging(verbose=verbose, debug=debug)


@ticketexp.command()
@click.option(
    "-a",
    "--aid",
    callback=_parse_aid,
    default=None,
    help="Application id as printed, e.g. a05010 (default: first listed).",
)
@click.option("-w", "--watch", is_flag=True, help="Keep reading presented cards.")
@click.option(
    "-s",
    "--save",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Save the raw scan as a JSON dump.",
)
@click.option("--settle", type=float, default=1.0, show_default=True,
              help="Seconds to wait between presentations in watch mode.")
def scan(aid, watch, save, settle):
    """Read the card on the first reader that has one."""
    from ticketexp.app.main import main
    from ticketexp.core.desfire import ScanConfig

    if watch and save:
        raise click.UsageError("--save reads a single card, drop --watch")
    config = ScanConfig(aid=aid, settle_delay=settle)
    main("scan", config=config, watch=watch, save=save)


@ticketexp.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--now",
    type=click.DateTime(formats=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]),
    default=None,
    help="Evaluate validity at this local time instead of the current time.",
)
def decode(path, now: datetime | None):
    """Decode a saved scan dump."""
    from ticketexp.app.main import main

    try:
        main("decode", dump=path, now=now)
    except ValueError as exc:
        raise click.ClickException(str(exc))


@ticketexp.command()
def info():
    """List applications, files and file settings of the card."""
    from ticketexp.app.main import main

    main("info")
