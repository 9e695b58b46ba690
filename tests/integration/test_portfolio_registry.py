import pytest

from app.domain.exceptions import ValidationError
from app.services.portfolio_service import CreationStatus, PortfolioRegistry


def _scripted_codes(*codes):
    remaining = list(codes)

    def factory():
        return remaining.pop(0)

    return factory


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_assigns_code_and_trims_name(db_session):
    registry = PortfolioRegistry(db_session, code_factory=_scripted_codes("PORT-7X3K"))

    creation = await registry.create("  Family Fund  ")

    assert creation.status == CreationStatus.CREATED
    assert creation.attempts == 1
    assert creation.portfolio.name == "Family Fund"
    assert creation.portfolio.code == "PORT-7X3K"
    assert creation.portfolio.currency == "USD"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("collisions", [1, 3, 9])
async def test_create_retries_past_taken_codes(db_session, collisions):
    seed = PortfolioRegistry(db_session, code_factory=_scripted_codes("PORT-AAAA"))
    await seed.create("Existing")
    await db_session.commit()

    codes = ["PORT-AAAA"] * collisions + ["PORT-BBBB"]
    registry = PortfolioRegistry(db_session, code_factory=_scripted_codes(*codes), max_attempts=10)

    creation = await registry.create("Newcomer")

    assert creation.created
    assert creation.attempts == collisions + 1
    assert creation.portfolio.code == "PORT-BBBB"
    # the earlier portfolio survives the collision rollbacks
    assert (await registry.lookup_by_code("PORT-AAAA")).name == "Existing"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_reports_exhaustion(db_session):
    seed = PortfolioRegistry(db_session, code_factory=lambda: "PORT-AAAA")
    await seed.create("Existing")
    await db_session.commit()

    registry = PortfolioRegistry(db_session, code_factory=lambda: "PORT-AAAA", max_attempts=10)
    creation = await registry.create("Unlucky")

    assert creation.status == CreationStatus.EXHAUSTED
    assert creation.attempts == 10
    assert creation.portfolio is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_rejects_blank_name_without_touching_storage(db_session):
    calls = []

    def factory():
        calls.append(1)
        return "PORT-CCCC"

    registry = PortfolioRegistry(db_session, code_factory=factory)
    with pytest.raises(ValidationError) as excinfo:
        await registry.create("   ")

    assert excinfo.value.status_code == 400
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_validates_currency(db_session):
    registry = PortfolioRegistry(db_session, code_factory=_scripted_codes("PORT-DDDD"))
    with pytest.raises(ValidationError):
        await registry.create("Euro Fund", currency="EURO")

    creation = await registry.create("Euro Fund", currency=" eur ")
    assert creation.portfolio.currency == "EUR"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("typed", ["PORT-7X3K", "port-7x3k", "  7x3k ", "7X3K"])
async def test_lookup_by_code_is_forgiving(db_session, typed):
    registry = PortfolioRegistry(db_session, code_factory=_scripted_codes("PORT-7X3K"))
    created = (await registry.create("Joinable")).portfolio

    found = await registry.lookup_by_code(typed)

    assert found is not None
    assert found.id == created.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_blank_code_is_validation_not_absence(db_session):
    registry = PortfolioRegistry(db_session)

    with pytest.raises(ValidationError):
        await registry.lookup_by_code("  ")
    assert await registry.lookup_by_code("PORT-ZZZZ") is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_by_id(db_session):
    registry = PortfolioRegistry(db_session, code_factory=_scripted_codes("PORT-EEEE"))
    created = (await registry.create("By Id")).portfolio

    assert (await registry.lookup_by_id(created.id)).code == "PORT-EEEE"
    assert await registry.lookup_by_id("00000000-0000-0000-0000-000000000000") is None
    with pytest.raises(ValidationError):
        await registry.lookup_by_id("")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_collision_keeps_earlier_uncommitted_work(db_session):
    registry = PortfolioRegistry(
        db_session,
        code_factory=_scripted_codes("PORT-AAAA", "PORT-AAAA", "PORT-FFFF"),
    )

    first = await registry.create("Pending")
    second = await registry.create("Second")

    assert second.created
    assert second.attempts == 2
    still_there = await registry.lookup_by_code("PORT-AAAA")
    assert still_there is not None
    assert still_there.id == first.portfolio.id

    await db_session.commit()
    assert (await registry.lookup_by_id(first.portfolio.id)).name == "Pending"
