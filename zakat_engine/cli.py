"""Flask CLI commands for price cache maintenance."""
import click
from flask.cli import with_appcontext

from zakat_engine.constants import PRICE_SOURCES
from zakat_engine.exceptions import CacheError, InvalidInput
from zakat_engine.facade import get_cache, get_config, get_nisab_service
from zakat_engine.services.calc import format_amount
from zakat_engine.services.nisab import PRICE_CACHE_KEYS


@click.group('zakat')
def zakat_cli():
    """Inspect and update cached metal prices."""


@zakat_cli.command('prices')
@with_appcontext
def prices_command():
    """Show current gold and silver prices per gram."""
    nisab = get_nisab_service()
    for metal, price in (('gold', nisab.get_gold_price()), ('silver', nisab.get_silver_price())):
        source = nisab.price_sources[metal]
        click.echo(f'{metal}: {price} per gram ({source}: {PRICE_SOURCES.get(source, "unknown")})')


@zakat_cli.command('set-price')
@click.argument('metal', type=click.Choice(['gold', 'silver']))
@click.argument('price', type=float)
@with_appcontext
def set_price_command(metal, price):
    """Set the cached price per gram of METAL."""
    nisab = get_nisab_service()
    try:
        if metal == 'gold':
            nisab.set_gold_price(price)
        else:
            nisab.set_silver_price(price)
    except InvalidInput as e:
        raise click.BadParameter(str(e), param_hint='PRICE')
    click.echo(f'Set {metal} price to {price} per gram (cached for {nisab.cache_ttl}s)')


@zakat_cli.command('nisab')
@with_appcontext
def nisab_command():
    """Show nisab thresholds at current prices."""
    config = get_config()
    nisab = get_nisab_service()
    click.echo(f'gold ({nisab.get_gold_nisab_weight():g} g): {format_amount(nisab.get_gold_nisab_value(), config)}')
    click.echo(f'silver ({nisab.get_silver_nisab_weight():g} g): {format_amount(nisab.get_silver_nisab_value(), config)}')


@zakat_cli.command('clear-cache')
@with_appcontext
def clear_cache_command():
    """Forget cached prices so configured defaults apply again."""
    cache = get_cache()
    try:
        for key in PRICE_CACHE_KEYS.values():
            cache.forget(key)
    except CacheError as e:
        raise click.ClickException(str(e))
    click.echo('Cleared cached metal prices')


def register_cli(app):
    """Register CLI commands with the Flask app."""
    app.cli.add_command(zakat_cli)
