# community_portal/cli/__init__.py
# =============================================================================
# Portal CLI (`flask portal ...`)
# Schema bootstrap, staff user creation, read-only listings, and demo data.
# =============================================================================

import random

import click
from faker import Faker
from flask.cli import AppGroup

from community_portal.errors import PortalError
from community_portal.extensions import db
from community_portal.forms import ContactForm, DonationForm, RequestSubmissionForm, UserForm, validate_payload
from community_portal.models import DONATION_FREQUENCIES, available_models
from community_portal.services.payments import mock_payment_id
from community_portal.storage import storage

portal = AppGroup("portal", help="Community portal maintenance commands.")


def _fail(err: PortalError) -> None:
    raise click.ClickException(err.message)


@portal.command("init-db")
def init_db_cmd() -> None:
    """Create all tables (use `flask db upgrade` for managed schemas)."""
    db.create_all()
    click.echo("Tables ready: " + ", ".join(m.__tablename__ for m in available_models().values()))


@portal.command("create-user")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def create_user_cmd(username: str, password: str) -> None:
    """Create a staff user with a hashed password."""
    try:
        data = validate_payload(UserForm, {"username": username, "password": password})
        if storage.get_user_by_username(data["username"]):
            raise click.ClickException(f"User {data['username']!r} already exists")
        user = storage.create_user(data)
    except PortalError as e:
        _fail(e)
    click.echo(f"Created user {user.id}: {user.username}")


@portal.command("list-donations")
def list_donations_cmd() -> None:
    donations = storage.get_donations()
    if not donations:
        click.echo("No donations.")
        return
    for d in donations:
        who = "anonymous" if d.anonymous else d.donor_name
        ref = d.stripe_payment_id or "-"
        click.echo(f"#{d.id}  ${d.amount_dollars:,.2f}  {d.frequency:<9}  {who} <{d.donor_email}>  {ref}")


@portal.command("list-requests")
def list_requests_cmd() -> None:
    submissions = storage.get_requests()
    if not submissions:
        click.echo("No requests.")
        return
    for r in submissions:
        files = len(r.file_urls or [])
        click.echo(f"#{r.id}  [{r.status}]  {r.request_type}: {r.subject}  ({r.full_name}, {files} file(s))")


@portal.command("list-messages")
def list_messages_cmd() -> None:
    messages = storage.get_contact_messages()
    if not messages:
        click.echo("No messages.")
        return
    for m in messages:
        click.echo(f"#{m.id}  {m.subject}  ({m.full_name} <{m.email}>)")


@portal.command("seed-demo")
@click.option("--count", default=5, show_default=True, help="Records to create per table.")
def seed_demo_cmd(count: int) -> None:
    """
    🌱 Seed demo requests, donations and contact messages.
    Donations get a development payment reference, as if Stripe were not configured.
    """
    fake = Faker()
    try:
        for _ in range(count):
            storage.create_request(
                validate_payload(
                    RequestSubmissionForm,
                    {
                        "fullName": fake.name(),
                        "email": fake.email(),
                        "phone": fake.phone_number(),
                        "address": fake.address().replace("\n", ", "),
                        "requestType": random.choice(["maintenance", "complaint", "assistance", "other"]),
                        "subject": fake.sentence(nb_words=5),
                        "description": fake.paragraph(),
                    },
                )
            )

            donation = storage.create_donation(
                validate_payload(
                    DonationForm,
                    {
                        "amount": random.choice([2500, 5000, 10000, fake.random_int(1, 500) * 100]),
                        "donorName": fake.name(),
                        "donorEmail": fake.email(),
                        "anonymous": fake.boolean(chance_of_getting_true=20),
                        "frequency": random.choice(DONATION_FREQUENCIES),
                    },
                )
            )
            storage.update_donation_stripe_id(donation.id, mock_payment_id())

            storage.create_contact_message(
                validate_payload(
                    ContactForm,
                    {
                        "fullName": fake.name(),
                        "email": fake.email(),
                        "subject": fake.sentence(nb_words=4),
                        "message": fake.paragraph(),
                    },
                )
            )
    except PortalError as e:
        _fail(e)

    click.echo(f"Seeded {count} request(s), donation(s) and contact message(s).")


__all__ = ["portal"]
