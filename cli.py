import click
import pandas as pd
from datetime import date, datetime
from decimal import Decimal

from config.constants import Frequency, PaymentMode, TransactionType
from config.settings import LOG_FORMAT, LOG_LEVEL
from core.calendar_view import describe_month
from core.date_scheduler import compute_end_date, generate_due_dates
from core.exceptions import RepaymentEngineError
from core.ledger import daily_collection_totals, summarize, transactions_from_frame
from core.plan_scaler import scale
from core.schedule_generator import create_loan_terms, generate_schedule
from data_manager.schema import LoanTerms, RepaymentPlanTemplate
from data_manager.data_validator import coerce_decimal
from utils.formatters import fmt_amount, fmt_date, fmt_periods
from utils.logger import setup_logging

FREQUENCIES = click.Choice([f.value for f in Frequency], case_sensitive=False)


def _parse_day(value):
    if value is None:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a YYYY-MM-DD date")


def _template_from_options(base_amount, repayment_per_period, advance_amount, late_fee, periods, frequency):
    return RepaymentPlanTemplate(
        id="cli",
        name="cli",
        frequency=Frequency(frequency.lower()),
        periods=periods,
        base_amount=coerce_decimal(base_amount, "base_amount"),
        repayment_per_period=coerce_decimal(repayment_per_period, "repayment_per_period"),
        advance_amount=coerce_decimal(advance_amount, "advance_amount"),
        late_fee_per_period=coerce_decimal(late_fee, "late_fee_per_period"),
    )


def _plan_options(func):
    options = [
        click.option('--base-amount', type=str, required=True, help='Principal the plan is calibrated to'),
        click.option('--repayment-per-period', type=str, required=True, help='Repayment per period at the base amount'),
        click.option('--advance-amount', type=str, default='0', help='Advance at the base amount'),
        click.option('--late-fee', type=str, default='0', help='Late fee per period'),
        click.option('--periods', type=int, required=True, help='Number of periods'),
        click.option('--frequency', type=FREQUENCIES, required=True, help='Repayment frequency'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option('--log-level', default=LOG_LEVEL, help='Log level (DEBUG, INFO, WARNING, ...)')
@click.option('--log-format', type=click.Choice(['standard', 'json']), default=LOG_FORMAT, help='Log format')
def cli(log_level, log_format):
    """Repayment plan and collection schedule tools."""
    setup_logging(log_level, log_format)


@cli.command('scale')
@_plan_options
@click.option('--amount-given', type=str, required=True, help='Disbursed amount')
@click.option('--start-date', type=str, help='Start date (YYYY-MM-DD)')
def scale_command(base_amount, repayment_per_period, advance_amount, late_fee, periods, frequency, amount_given, start_date):
    """Scales a plan template to a disbursed amount."""
    try:
        template = _template_from_options(base_amount, repayment_per_period, advance_amount, late_fee, periods, frequency)
        if start_date:
            terms = create_loan_terms(template, amount_given, _parse_day(start_date))
        else:
            terms = scale(template, amount_given)
    except RepaymentEngineError as e:
        raise click.ClickException(str(e))
    click.echo(f"Repayment amount: {fmt_amount(terms.repayment_amount)}")
    click.echo(f"Advance amount: {fmt_amount(terms.advance_amount)}")
    click.echo(f"Late fee per period: {fmt_amount(terms.late_fee_per_period)}")
    click.echo(f"Frequency: {terms.frequency.label}")
    click.echo(f"Periods: {fmt_periods(terms.periods, terms.frequency)}")
    if terms.is_anchored:
        click.echo(f"Start date: {fmt_date(terms.start_date)}")
        click.echo(f"End date: {fmt_date(terms.end_date)}")


@cli.command('end-date')
@click.option('--start-date', type=str, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--frequency', type=FREQUENCIES, required=True, help='Repayment frequency')
@click.option('--periods', type=int, required=True, help='Number of periods')
def end_date_command(start_date, frequency, periods):
    """Prints the plan end date."""
    try:
        click.echo(fmt_date(compute_end_date(_parse_day(start_date), frequency, periods)))
    except RepaymentEngineError as e:
        raise click.ClickException(str(e))


@cli.command('due-dates')
@click.option('--start-date', type=str, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--frequency', type=FREQUENCIES, required=True, help='Repayment frequency')
@click.option('--periods', type=int, required=True, help='Number of periods')
def due_dates_command(start_date, frequency, periods):
    """Lists every due date, one per line."""
    try:
        for d in generate_due_dates(_parse_day(start_date), frequency, periods):
            click.echo(fmt_date(d))
    except RepaymentEngineError as e:
        raise click.ClickException(str(e))


@cli.command('schedule')
@_plan_options
@click.option('--amount-given', type=str, required=True, help='Disbursed amount')
@click.option('--start-date', type=str, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--transactions-file', type=click.Path(exists=True), help='Ledger CSV to reconcile against')
@click.option('--today', type=str, help='Reference date (YYYY-MM-DD), defaults to today')
def schedule_command(base_amount, repayment_per_period, advance_amount, late_fee, periods, frequency,
                     amount_given, start_date, transactions_file, today):
    """Generates the due-date schedule and outputs it as CSV."""
    try:
        template = _template_from_options(base_amount, repayment_per_period, advance_amount, late_fee, periods, frequency)
        terms = create_loan_terms(template, amount_given, _parse_day(start_date))
        transactions = transactions_from_frame(pd.read_csv(transactions_file)) if transactions_file else []
        schedule = generate_schedule(terms, transactions, _parse_day(today))
    except RepaymentEngineError as e:
        raise click.ClickException(str(e))
    click.echo(schedule.to_csv(index=False))


@cli.command('calendar')
@click.option('--year', type=int, required=True, help='Calendar year')
@click.option('--month', type=int, required=True, help='Calendar month (1-12)')
@click.option('--start-date', type=str, help='Plan start date (YYYY-MM-DD)')
@click.option('--frequency', type=FREQUENCIES, help='Repayment frequency')
@click.option('--periods', type=int, help='Number of periods')
@click.option('--today', type=str, help='Reference date (YYYY-MM-DD), defaults to today')
def calendar_command(year, month, start_date, frequency, periods, today):
    """Prints a month grid; * marks due dates, [] marks today."""
    terms = None
    try:
        if start_date and frequency and periods:
            start = _parse_day(start_date)
            terms = LoanTerms(
                frequency=Frequency(frequency.lower()),
                periods=periods,
                repayment_amount=Decimal("0"),
                advance_amount=Decimal("0"),
                late_fee_per_period=Decimal("0"),
                start_date=start,
                end_date=compute_end_date(start, frequency, periods),
            )
        desc = describe_month(year, month, terms, _parse_day(today))
    except RepaymentEngineError as e:
        raise click.ClickException(str(e))

    click.echo(f"{desc.id:^35}")
    click.echo(" ".join(f"{d:>4}" for d in ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"]))
    cells = ["    "] * desc.first_weekday_offset
    for day in desc.days:
        c = day.classification
        mark = "*" if c.is_due else ("." if c.is_in_range else " ")
        text = f"[{day.day.day}]" if c.is_today else f"{day.day.day}{mark}"
        cells.append(f"{text:>4}")
    for i in range(0, len(cells), 7):
        click.echo(" ".join(cells[i:i + 7]))


@cli.command('summarize')
@click.option('--repayment-amount', type=str, required=True, help='Scaled repayment per period')
@click.option('--periods', type=int, required=True, help='Number of periods')
@click.option('--frequency', type=FREQUENCIES, required=True, help='Repayment frequency')
@click.option('--start-date', type=str, required=True, help='Start date (YYYY-MM-DD)')
@click.option('--late-fee', type=str, default='0', help='Late fee per period')
@click.option('--transactions-file', type=click.Path(exists=True), required=True, help='Ledger CSV')
@click.option('--today', type=str, help='Reference date (YYYY-MM-DD), defaults to today')
@click.option('--daily', is_flag=True, help='Also print daily cash/UPI totals')
def summarize_command(repayment_amount, periods, frequency, start_date, late_fee, transactions_file, today, daily):
    """Summarizes a customer's ledger against its loan terms."""
    try:
        start = _parse_day(start_date)
        terms = LoanTerms(
            frequency=Frequency(frequency.lower()),
            periods=periods,
            repayment_amount=coerce_decimal(repayment_amount, "repayment_amount"),
            advance_amount=Decimal("0"),
            late_fee_per_period=coerce_decimal(late_fee, "late_fee_per_period"),
            start_date=start,
            end_date=compute_end_date(start, frequency, periods),
        )
        transactions = transactions_from_frame(pd.read_csv(transactions_file))
        summary = summarize(terms, transactions, _parse_day(today))
    except RepaymentEngineError as e:
        raise click.ClickException(str(e))

    click.echo(f"Total repaid: {fmt_amount(summary.total_repaid)}")
    click.echo(f"{PaymentMode.CASH.label}: {fmt_amount(summary.total_by_cash)}")
    click.echo(f"{PaymentMode.UPI.label}: {fmt_amount(summary.total_by_upi)}")
    for tx_type in TransactionType:
        click.echo(f"  {tx_type.label}: {fmt_amount(summary.totals_by_type[tx_type.value])}")
    click.echo(f"Expected total: {fmt_amount(summary.expected_total_repayment)}")
    click.echo(f"Pending amount: {fmt_amount(summary.pending_amount)}")
    click.echo(f"Pending periods: {summary.pending_periods_label}")
    if summary.overdue_periods:
        click.echo(f"Overdue periods: {summary.overdue_periods}")
        click.echo(f"Accrued late fee: {fmt_amount(summary.accrued_late_fee)}")
    if daily:
        click.echo("\n--- Daily collections ---")
        click.echo(daily_collection_totals(transactions).to_string(index=False))


if __name__ == "__main__":
    cli()
