import click
from flask.cli import with_appcontext

from welfare.extensions import db
from welfare.models import Member, MemberRole


@click.command('init-db')
@with_appcontext
def init_db():
    """Create all database tables."""
    db.create_all()
    click.echo('Database tables created.')


@click.command('create-admin')
@click.argument('name')
@click.argument('email')
@click.argument('epf')
@click.argument('welfare_no')
@click.argument('password')
@with_appcontext
def create_admin(name, email, epf, welfare_no, password):
    """Create an admin member, or promote the member with EMAIL."""
    member = Member.query.filter_by(email=email.strip().lower()).first()
    if member is not None:
        member.role = MemberRole.ADMIN.value
        db.session.commit()
        click.echo(f'Member {member.email} promoted to admin.')
        return

    try:
        member = Member(name=name, email=email, epf=epf, welfare_no=welfare_no,
                        role=MemberRole.ADMIN.value)
    except ValueError as e:
        raise click.BadParameter(str(e))
    member.set_password(password)
    db.session.add(member)
    db.session.commit()
    click.echo(f'Admin {member.email} created.')


def register_cli(app):
    app.cli.add_command(init_db)
    app.cli.add_command(create_admin)
