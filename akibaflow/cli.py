# akibaflow/cli.py
import logging
import os
from contextlib import contextmanager
from decimal import Decimal

import click
from dotenv import load_dotenv

from akibaflow import config as config_module
from akibaflow.api.auth import WHOAMI_PATH
from akibaflow.config import load_config
from akibaflow.context import AppContext, sign_in, sign_out
from akibaflow.core.aggregation import (
    account_name,
    budget_progress,
    budget_split,
    category_name,
    filter_transactions,
    income_total,
    spending_by_category,
    total_balance,
)
from akibaflow.errors import AkibaFlowError, ApiError, NotAuthenticatedError
from akibaflow.forms import (
    ACCOUNT_TYPES,
    account_form,
    account_update_form,
    category_form,
    profile_update_form,
    register_form,
    transaction_form,
    transaction_update_form,
)

logger = logging.getLogger(__name__)


@contextmanager
def failure_reported(action):
    """Turn client errors into a one-line message and exit status 1."""
    try:
        yield
    except NotAuthenticatedError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)
    except ApiError as e:
        message = f"Failed to {action}: {e}"
        if e.is_unauthorized:
            message += " (session expired, please log in again)"
        click.echo(message, err=True)
        raise SystemExit(1)
    except AkibaFlowError as e:
        click.echo(f"Failed to {action}: {e}", err=True)
        raise SystemExit(1)


def _money(app, amount):
    return f"{app.config['currency']} {Decimal(amount or 0):.2f}"


def _signed(app, tx):
    sign = "+" if tx.transaction_type == "INCOME" else "-"
    return f"{sign}{_money(app, tx.amount)}"


def _echo_transactions(app, transactions, accounts, categories):
    for tx in transactions:
        click.echo(
            f"#{tx.id:<5} {tx.transaction_date.date().isoformat()}  "
            f"{tx.description or '-':<28} "
            f"{account_name(accounts, tx.account_id):<16} "
            f"{category_name(categories, tx.category_id):<16} "
            f"{_signed(app, tx)}"
        )


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults to ./config.yaml when present)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with AKIBAFLOW_* settings'
)
@click.option(
    '--base-url', 'base_url',
    default=None,
    help='API base URL (overrides config and AKIBAFLOW_API_BASE_URL)'
)
@click.option(
    '--verbose', '-v',
    is_flag=True,
    default=False,
    help='Log every request at DEBUG level'
)
@click.pass_context
def main(ctx, config_path, env_file, base_url, verbose):
    """
    AkibaFlow personal finance client: accounts, categories, transactions and
    budgets kept on the AkibaFlow API.
    """
    if env_file:
        load_dotenv(env_file)
    level = "DEBUG" if verbose else os.getenv("AKIBAFLOW_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise click.BadParameter(
            f"unknown log level '{level}'", param_hint="AKIBAFLOW_LOG_LEVEL"
        )
    logging.basicConfig(level=level)

    if ctx.obj is not None:
        # context supplied by the caller (embedding, tests)
        return
    cfg = load_config(config_path)
    if base_url:
        cfg['api_base_url'] = base_url
    cfg['config_path'] = config_path
    logger.debug("Using API at %s", cfg['api_base_url'])
    app = AppContext.open(cfg)
    ctx.call_on_close(app.close)
    ctx.obj = app


# -----------------------------------------------------------------------------
# Auth
# -----------------------------------------------------------------------------

@main.command()
@click.option('--username', '-u', prompt='Email', help='Account email')
@click.option('--password', '-p', prompt=True, hide_input=True)
@click.pass_obj
def login(app, username, password):
    """Log in and remember the session on this device."""
    with failure_reported("log in"):
        session = sign_in(app, username, password)
    click.echo(f"Welcome back, {session.user.first_name or 'User'}!")


@main.command()
@click.option('--first-name', prompt='First name')
@click.option('--last-name', prompt='Last name')
@click.option('--email', prompt='Email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--phone-number', prompt='Phone number')
@click.pass_obj
def register(app, first_name, last_name, email, password, phone_number):
    """Create an account on the API."""
    with failure_reported("register"):
        user = app.auth.register(
            register_form(first_name, last_name, email, password, phone_number)
        )
    click.echo(f"Registration successful for {user.email}! Please login.")


@main.command()
@click.pass_obj
def logout(app):
    """Forget the stored session."""
    sign_out(app)
    click.echo("Logged out.")


@main.group(invoke_without_command=True)
@click.option('--refresh', is_flag=True, default=False, help='Ask the API instead of the stored session')
@click.pass_context
def profile(ctx, refresh):
    """Show or edit the logged-in user."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(show_profile, refresh=refresh)


@profile.command('show')
@click.option('--refresh', is_flag=True, default=False, help='Ask the API instead of the stored session')
@click.pass_obj
def show_profile(app, refresh):
    with failure_reported("load profile"):
        user = app.require_session().user
        if refresh:
            user = app.auth.whoami(refetch=True)
    click.echo(f"{user.full_name}")
    click.echo(f"Email: {user.email}")
    if user.phone_number:
        click.echo(f"Phone: {user.phone_number}")


@profile.command('update')
@click.option('--first-name', default=None)
@click.option('--last-name', default=None)
@click.option('--phone-number', default=None)
@click.pass_obj
def update_profile(app, first_name, last_name, phone_number):
    """Edit your name or phone number; the stored session follows."""
    with failure_reported("update profile"):
        session = app.require_session()
        user = app.users.update(
            session.user.id, profile_update_form(first_name, last_name, phone_number)
        )
        app.session.set(user, session.token)
        app.client.cache.invalidate(WHOAMI_PATH)
    click.echo(f"Profile updated for {user.full_name}.")


@main.command()
@click.pass_obj
def dashboard(app):
    """Total balance and the latest transactions."""
    with failure_reported("load dashboard"):
        user = app.require_session().user
        accounts = app.accounts.list()
        latest = app.transactions.list(limit=int(app.config['dashboard_limit']))
        categories = app.categories.list()

    click.echo(f"Welcome Back, {user.first_name or 'User'}!")
    click.echo(f"Total Balance: {_money(app, total_balance(accounts))}")
    click.echo("\nLatest Transactions")
    if not latest:
        click.echo("No transactions yet")
        return
    _echo_transactions(app, latest, accounts, categories)


# -----------------------------------------------------------------------------
# Accounts
# -----------------------------------------------------------------------------

@main.group()
def accounts():
    """List and manage accounts."""


@accounts.command('list')
@click.pass_obj
def list_accounts(app):
    with failure_reported("load accounts"):
        app.require_session()
        items = app.accounts.list()
    if not items:
        click.echo("No accounts yet. Add your first account to get started.")
        return
    for acc in items:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"#{acc.id:<5} {acc.name:<24} {acc.type.upper():<9} "
            f"{_money(app, acc.current_balance)}  "
            f"(initial {_money(app, acc.initial_balance)}, {acc.currency}){status}"
        )
    click.echo(f"Total Balance: {_money(app, total_balance(items))}")


@accounts.command('show')
@click.argument('account_id', type=int)
@click.pass_obj
def show_account(app, account_id):
    with failure_reported("load account"):
        app.require_session()
        acc = app.accounts.get(account_id)
    click.echo(f"#{acc.id} {acc.name}")
    click.echo(f"Type: {acc.type}")
    click.echo(f"Balance: {_money(app, acc.current_balance)}")
    click.echo(f"Initial balance: {_money(app, acc.initial_balance)}")
    click.echo(f"Currency: {acc.currency}")
    click.echo(f"Active: {'yes' if acc.is_active else 'no'}")


@accounts.command('create')
@click.option('--name', prompt='Account name')
@click.option('--initial-balance', prompt='Initial balance')
@click.option('--currency', default=None, help='Defaults to the configured currency')
@click.option('--type', 'account_type', type=click.Choice(ACCOUNT_TYPES), default=None)
@click.pass_obj
def create_account(app, name, initial_balance, currency, account_type):
    with failure_reported("create account"):
        app.require_session()
        form = account_form(
            name,
            initial_balance,
            currency or app.config['currency'],
            account_type or app.config['account_type'],
        )
        account = app.accounts.create(form)
        app.accounts.list(refetch=True)
    click.echo(f"Account '{account.name}' created successfully (#{account.id}).")


@accounts.command('update')
@click.argument('account_id', type=int)
@click.option('--name', default=None)
@click.option('--currency', default=None)
@click.option('--type', 'account_type', type=click.Choice(ACCOUNT_TYPES), default=None)
@click.option('--active/--inactive', 'is_active', default=None)
@click.pass_obj
def update_account(app, account_id, name, currency, account_type, is_active):
    with failure_reported("update account"):
        app.require_session()
        account = app.accounts.update(
            account_id, account_update_form(name, currency, account_type, is_active)
        )
    click.echo(f"Account #{account.id} updated.")


@accounts.command('delete')
@click.argument('account_id', type=int)
@click.confirmation_option(prompt='Delete this account?')
@click.pass_obj
def delete_account(app, account_id):
    with failure_reported("delete account"):
        app.require_session()
        app.accounts.delete(account_id)
    click.echo(f"Account #{account_id} deleted.")


# -----------------------------------------------------------------------------
# Categories
# -----------------------------------------------------------------------------

@main.group()
def categories():
    """List categories with their spending, or add one."""


@categories.command('list')
@click.pass_obj
def list_categories(app):
    with failure_reported("load categories"):
        app.require_session()
        items = app.categories.list()
        txs = app.transactions.list(limit=int(app.config['page_size']))
    if not items:
        click.echo("No categories found")
        return
    spending = spending_by_category(txs, items)
    for cat in items:
        badge = " [custom]" if cat.is_custom else ""
        click.echo(
            f"#{cat.id:<5} {cat.name:<20} {cat.system_name or '-':<14} "
            f"Spent {_money(app, spending[cat.id])}{badge}"
        )


@categories.command('show')
@click.argument('category_id', type=int)
@click.pass_obj
def show_category(app, category_id):
    with failure_reported("load category"):
        app.require_session()
        cat = app.categories.get(category_id)
    click.echo(f"#{cat.id} {cat.name}")
    click.echo(f"System name: {cat.system_name or '-'}")
    click.echo(f"Custom: {'yes' if cat.is_custom else 'no'}")


@categories.command('create')
@click.option('--name', prompt='Category name')
@click.option('--system-name', default=None, help='Predefined budgeting category, e.g. food')
@click.pass_obj
def create_category(app, name, system_name):
    with failure_reported("create category"):
        app.require_session()
        category = app.categories.create(category_form(name, system_name))
    click.echo(f"Category '{category.name}' created successfully!")


# -----------------------------------------------------------------------------
# Transactions
# -----------------------------------------------------------------------------

@main.group()
def transactions():
    """List, filter and record transactions."""


@transactions.command('list')
@click.option('--search', default='', help='Match text in the description')
@click.option('--type', 'transaction_type', type=click.Choice(['ALL', 'INCOME', 'EXPENSE'], case_sensitive=False), default='ALL')
@click.option('--category', 'category_id', type=int, default=None)
@click.option('--skip', type=int, default=0)
@click.option('--limit', type=int, default=None, help='Page size (defaults to config page_size)')
@click.pass_obj
def list_transactions(app, search, transaction_type, category_id, skip, limit):
    with failure_reported("load transactions"):
        app.require_session()
        page = app.transactions.list(skip=skip, limit=limit or int(app.config['page_size']))
        accounts_ = app.accounts.list()
        categories_ = app.categories.list()
    matches = filter_transactions(page, search, transaction_type, category_id)
    if not matches:
        filtered = search or transaction_type.upper() != 'ALL' or category_id is not None
        click.echo("No transactions match your filters" if filtered else "No transactions yet")
        return
    _echo_transactions(app, matches, accounts_, categories_)


@transactions.command('show')
@click.argument('transaction_id', type=int)
@click.pass_obj
def show_transaction(app, transaction_id):
    with failure_reported("load transaction"):
        app.require_session()
        tx = app.transactions.get(transaction_id)
        accounts_ = app.accounts.list()
        categories_ = app.categories.list()
    click.echo(f"#{tx.id} {tx.description or '-'}")
    click.echo(f"Amount: {_signed(app, tx)}")
    click.echo(f"Date: {tx.transaction_date.date().isoformat()}")
    click.echo(f"Account: {account_name(accounts_, tx.account_id)}")
    click.echo(f"Category: {category_name(categories_, tx.category_id)}")
    if tx.is_automated:
        click.echo("Recorded automatically")


@transactions.command('add')
@click.option('--amount', prompt='Amount')
@click.option('--type', 'transaction_type', type=click.Choice(['INCOME', 'EXPENSE'], case_sensitive=False), default='EXPENSE')
@click.option('--account', 'account_id', prompt='Account id')
@click.option('--category', 'category_id', prompt='Category id')
@click.option('--description', default='')
@click.option('--date', 'transaction_date', default=None, help='YYYY-MM-DD, defaults to today')
@click.pass_obj
def add_transaction(app, amount, transaction_type, account_id, category_id, description, transaction_date):
    with failure_reported("add transaction"):
        app.require_session()
        tx = app.transactions.create(
            transaction_form(amount, transaction_type, account_id, category_id, description, transaction_date)
        )
    click.echo(f"Transaction #{tx.id} added successfully ({_signed(app, tx)}).")


@transactions.command('update')
@click.argument('transaction_id', type=int)
@click.option('--category', 'category_id', default=None)
@click.option('--description', default=None)
@click.option('--date', 'transaction_date', default=None, help='YYYY-MM-DD')
@click.pass_obj
def update_transaction(app, transaction_id, category_id, description, transaction_date):
    with failure_reported("update transaction"):
        app.require_session()
        tx = app.transactions.update(
            transaction_id, transaction_update_form(category_id, description, transaction_date)
        )
    click.echo(f"Transaction #{tx.id} updated.")


@transactions.command('delete')
@click.argument('transaction_id', type=int)
@click.confirmation_option(prompt='Delete this transaction?')
@click.pass_obj
def delete_transaction(app, transaction_id):
    with failure_reported("delete transaction"):
        app.require_session()
        app.transactions.delete(transaction_id)
    click.echo(f"Transaction #{transaction_id} deleted.")


# -----------------------------------------------------------------------------
# Budgets
# -----------------------------------------------------------------------------

def _bar(percent, width=20):
    filled = max(0, min(width, int(percent * width / 100)))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


@main.group(invoke_without_command=True)
@click.pass_context
def budgets(ctx):
    """The 50/30/20 split of income and per-category budget progress."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(show_budgets)


@budgets.command('show')
@click.pass_obj
def show_budgets(app):
    with failure_reported("load budgets"):
        app.require_session()
        txs = app.transactions.list(limit=int(app.config['page_size']))
        categories_ = app.categories.list()
        split = budget_split(income_total(txs), app.config['budget_rule'])

    rule = app.config['budget_rule']
    click.echo("/".join(str(v) for v in rule.values()) + " Rule")
    for bucket, amount in split.items():
        click.echo(f"  {bucket.capitalize():<10} {rule[bucket]:>3}%  {_money(app, amount)}")

    click.echo("\nCategory Budgets")
    rows = budget_progress(categories_, spending_by_category(txs, categories_), app.config['budgets'])
    if not rows:
        click.echo("No budgets set. Use 'akibaflow budgets set CATEGORY LIMIT'.")
        return
    for row in rows:
        click.echo(
            f"  {row['category']:<20} {_money(app, row['spent'])} / {_money(app, row['budget'])} "
            f"{_bar(row['percent'])} {_money(app, row['remaining'])} remaining"
        )


@budgets.command('set')
@click.argument('category')
@click.argument('limit', type=click.FloatRange(min=0, min_open=True))
@click.pass_obj
def set_budget(app, category, limit):
    """Set the monthly limit for a category (by name or system name)."""
    config_module.set_budget(category, limit, app.config.get('config_path'))
    click.echo(f"Budget for '{category}' set to {_money(app, Decimal(str(limit)))}.")


@budgets.command('remove')
@click.argument('category')
@click.pass_obj
def remove_budget(app, category):
    config_module.remove_budget(category, app.config.get('config_path'))
    click.echo(f"Budget for '{category}' removed.")
