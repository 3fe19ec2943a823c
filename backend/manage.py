from studyhall import create_app
from studyhall.seed import seed_base, seed_demo
from studyhall.services.mock_data import initialize_mock_data, is_mock_data_initialized
from flask.cli import with_appcontext
from flask_migrate import upgrade, migrate, init
import click

app = create_app()

@app.cli.command("db-init")
@with_appcontext
def db_init():
    """Initializes migrations directory"""
    init()

@app.cli.command("db-migrate")
@with_appcontext
def db_migrate():
    """Creates a new migration"""
    migrate()

@app.cli.command("db-upgrade")
@with_appcontext
def db_upgrade():
    """Applies migrations"""
    upgrade()

@app.cli.command("seed")
@with_appcontext
def seed():
    """Creates roles, the admin account and the zone layouts"""
    seed_base()
    click.echo("Base data seeded.")

@app.cli.command("seed-demo")
@click.option("--no-attendance", is_flag=True, help="Only seed students, not attendance sheets.")
@with_appcontext
def seed_demo_command(no_attendance):
    """Seeds demo users, a generated roster and demo attendance"""
    result = seed_demo(with_attendance=not no_attendance)
    click.echo(f"Seeded {result['students']} students and {result['sheets']} attendance sheets.")

@app.cli.command("mock-attendance")
@click.option("--force", is_flag=True, help="Fill missing sheets even if demo data already exists.")
@with_appcontext
def mock_attendance(force):
    """Writes demo attendance sheets for the demo date window"""
    if is_mock_data_initialized() and not force:
        click.echo("Demo attendance already present. Use --force to fill gaps.")
        return
    written = initialize_mock_data()
    click.echo(f"Wrote {written} attendance sheets.")
