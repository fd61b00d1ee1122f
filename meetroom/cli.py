"""Meetroom CLI tool (meetroomctl)."""

import typer
from sqlalchemy.engine import make_url

app = typer.Typer(name="meetroomctl", help="Meetroom CLI")
db_app = typer.Typer(help="Database management commands")
app.add_typer(db_app, name="db")


@db_app.command("create")
def db_create():
    """Create the MySQL database if it doesn't exist."""
    import pymysql
    from meetroom.core.config import settings

    url = make_url(settings.DATABASE_URL)
    if not url.drivername.startswith("mysql"):
        typer.echo(f"Nothing to create for '{url.drivername}' databases")
        raise typer.Exit()

    conn = pymysql.connect(
        host=url.host or "localhost",
        port=url.port or 3306,
        user=url.username,
        password=url.password or "",
    )
    try:
        cursor = conn.cursor()
        cursor.execute(
            f"CREATE DATABASE IF NOT EXISTS `{url.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
        typer.echo(f"Database '{url.database}' created (or already exists)")
    finally:
        conn.close()


@db_app.command("init")
def db_init():
    """Create all tables."""
    from meetroom.db.session import init_db

    init_db()
    typer.echo("Tables created")


@db_app.command("seed")
def db_seed():
    """Seed default roles and the admin user."""
    from meetroom.db.session import SessionLocal
    from meetroom.db.seeds.seed_roles import seed_roles
    from meetroom.db.seeds.seed_admin import seed_admin

    db = SessionLocal()
    try:
        added = seed_roles(db)
        created = seed_admin(db)
    finally:
        db.close()
    typer.echo(f"Seeded {added} roles; admin {'created' if created else 'unchanged'}")


@db_app.command("reset")
def db_reset():
    """Drop and recreate every table (DANGER)."""
    confirm = typer.confirm("This will DROP all tables. Continue?")
    if not confirm:
        raise typer.Abort()
    from meetroom.db.base import Base
    from meetroom.db.session import engine, init_db

    import meetroom.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    init_db()
    typer.echo("Tables dropped and recreated")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Host"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(True, help="Auto-reload"),
):
    """Start the FastAPI development server."""
    import uvicorn
    uvicorn.run("meetroom.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
