import asyncio
import typer
from sqlalchemy.ext.asyncio import AsyncSession

import aimak.db_models # noqa: F401

from aimak.ai.dependencies import get_ai_gateway
from aimak.ai.errors import AIServiceError
from aimak.articles import service as articles_service
from aimak.articles.services.categorization import CategorizationAdvisor
from aimak.categories import service as categories_service
from aimak.database import async_session_factory
from aimak.users.schema import UserCreate
from aimak.users.service import create_user
from aimak.users.models import User as UserModel, UserRole

cli = typer.Typer()

async def create_admin_runner(name: str, email: str, password: str, db: AsyncSession, role: UserRole):
    print(f"--- {role.value.title()} User Creation ---")
    user_data = UserCreate(name=name, email=email, password=password)

    print(f"Creating {role.value.lower()} user '{email}'...")
    admin_user: UserModel = await create_user(user_data=user_data, db=db, role=role)

    print("\n✅ User created successfully!")
    print(f"   ID: {admin_user.id}")
    print(f"   Email: {admin_user.email}")
    print(f"   Role: {admin_user.role}")


@cli.command(name="create-admin")
def createadmin(
    name: str = typer.Option(..., "--name", "-n", help="Full name."),
    email: str = typer.Option(..., "--email", "-e", help="Email address (login)."),
    password: str = typer.Option(..., "--password", "-p", help="Password."),
    editor: bool = typer.Option(False, "--editor", help="Create an EDITOR instead of an ADMIN."),
):
    """
    Creates a newsroom account with ADMIN (default) or EDITOR privileges.
    """
    role = UserRole.EDITOR if editor else UserRole.ADMIN

    async def main():
        async with async_session_factory() as session:
            await create_admin_runner(name=name, email=email, password=password, db=session, role=role)

    try:
        asyncio.run(main())
    except Exception as e:
        detail = getattr(e, "detail", None) or str(e)
        print(f"\n❌ Error creating user: {detail}")
        raise typer.Exit(code=1)


@cli.command(name="seed-categories")
def seed_categories():
    """
    Insert the default newsroom sections; existing slugs are left untouched.
    """
    async def runner():
        async with async_session_factory() as session:
            return await categories_service.seed_default_categories(session)

    result = asyncio.run(runner())
    print(f"✅ Categories seeded: created={result.created}, skipped={result.skipped}, total={result.total}")


@cli.command(name="categorize-all")
def categorize_all(
    delay: float = typer.Option(None, "--delay", help="Seconds between AI calls (defaults to AI_CATEGORIZE_ALL_DELAY_SECONDS)."),
):
    """
    Re-categorize every article with the configured AI provider.
    """
    advisor = CategorizationAdvisor(get_ai_gateway())

    async def runner():
        async with async_session_factory() as session:
            return await articles_service.categorize_all(session, advisor, delay=delay)

    try:
        result = asyncio.run(runner())
    except AIServiceError as e:
        print(f"❌ {e.message}")
        raise typer.Exit(code=1)

    stats = result.stats
    print(f"{'✅' if result.success else '⚠️'} {result.message}: "
          f"total={stats.total}, updated={stats.updated}, skipped={stats.skipped}, errors={stats.errors}")


if __name__ == "__main__":
    cli()
