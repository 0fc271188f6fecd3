"""Tests for the price ingestor: batching, float32 rows, partial progress."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy import func, select

from market_watch.errors import UpstreamError
from market_watch.models import SKU, Detail, Language, Product, Rarity, SKUPrice
from market_watch.pipeline.prices import batched, build_price_rows, ingest_prices, to_float32
from market_watch.pipeline.tcgplayer import RemoteSKUPrice
from tests.fakes import FakeTCGPlayer


def _store_skus(db_session, count: int, first_remote_id: int = 1000) -> list[SKU]:
    rarity = Rarity(name="Common", tcgplayer_id=1)
    detail = Detail(name="Card X")
    language = Language(name="English", tcgplayer_id=1)
    db_session.add_all([rarity, detail, language])
    db_session.flush()
    product = Product(tcgplayer_id=1, detail_id=detail.id, rarity_id=rarity.id)
    db_session.add(product)
    db_session.flush()
    skus = [
        SKU(tcgplayer_id=first_remote_id + i, product_id=product.id, language_id=language.id)
        for i in range(count)
    ]
    db_session.add_all(skus)
    db_session.commit()
    return skus


def _price_count(db_session) -> int:
    return db_session.scalar(select(func.count()).select_from(SKUPrice))


def test_250_skus_make_three_batches(db_session, settings) -> None:
    _store_skus(db_session, 250)
    client = FakeTCGPlayer()

    inserted = ingest_prices(db_session, client, settings)

    calls = client.called("list_sku_prices")
    assert [len(args[0]) for args in calls] == [100, 100, 50]
    assert inserted == 250
    assert _price_count(db_session) == 250


def test_every_sku_requested_once(db_session, settings) -> None:
    _store_skus(db_session, 7)
    settings.PRICE_BATCH_SIZE = 3
    client = FakeTCGPlayer()

    ingest_prices(db_session, client, settings)

    requested = [sku_id for args in client.called("list_sku_prices") for sku_id in args[0]]
    assert requested == list(range(1000, 1007))


def test_no_skus_no_calls(db_session, settings) -> None:
    client = FakeTCGPlayer()

    assert ingest_prices(db_session, client, settings) == 0
    assert client.called("list_sku_prices") == []


def test_price_rows_link_local_sku_and_round_to_float32(db_session, settings) -> None:
    skus = _store_skus(db_session, 1)
    client = FakeTCGPlayer(prices={1000: (1.1, 0.99)})

    ingest_prices(db_session, client, settings)

    row = db_session.scalars(select(SKUPrice)).one()
    assert row.sku_id == skus[0].id
    assert row.price == pytest.approx(to_float32(1.1))
    assert row.shipping == pytest.approx(to_float32(0.99))
    assert row.created_at is not None


def test_sleep_between_batches_only(db_session, settings) -> None:
    _store_skus(db_session, 250)

    with patch("market_watch.pipeline.prices.time.sleep") as mock_sleep:
        ingest_prices(db_session, FakeTCGPlayer(), settings, sleep_seconds=0.1)

    assert mock_sleep.call_count == 2
    mock_sleep.assert_called_with(0.1)


def test_failed_batch_keeps_earlier_batches(db_session, settings) -> None:
    _store_skus(db_session, 250)
    client = FakeTCGPlayer()
    original = client.list_sku_prices

    def fail_second_batch(sku_ids):
        if len(client.called("list_sku_prices")) == 1:
            client.calls.append(("list_sku_prices", (list(sku_ids),)))
            raise UpstreamError("rate limited")
        return original(sku_ids)

    client.list_sku_prices = fail_second_batch

    with pytest.raises(UpstreamError):
        ingest_prices(db_session, client, settings)

    assert len(client.called("list_sku_prices")) == 2
    assert _price_count(db_session) == 100


def test_second_run_appends(db_session, settings) -> None:
    _store_skus(db_session, 5)
    client = FakeTCGPlayer()

    ingest_prices(db_session, client, settings)
    ingest_prices(db_session, client, settings)

    assert _price_count(db_session) == 10


def test_unknown_sku_in_response_skipped() -> None:
    prices = [
        RemoteSKUPrice(sku_id=1, low_price=2.0, lowest_shipping=0.0),
        RemoteSKUPrice(sku_id=999, low_price=3.0, lowest_shipping=0.0),
    ]

    rows = build_price_rows(prices, {1: [10]})

    assert [r.sku_id for r in rows] == [10]


def test_missing_prices_stored_as_null() -> None:
    rows = build_price_rows([RemoteSKUPrice(sku_id=1)], {1: [10]})

    assert rows[0].price is None
    assert rows[0].shipping is None


def test_batched_keeps_final_partial_batch() -> None:
    assert list(batched(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]
    assert list(batched([], 100)) == []


def test_batched_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        list(batched([1], 0))


def test_to_float32() -> None:
    assert to_float32(None) is None
    assert to_float32(0.5) == 0.5
    assert to_float32(1.1) != 1.1
    assert abs(to_float32(1.1) - 1.1) < 1e-6


def test_rows_sharing_remote_id_each_get_a_price(db_session, settings) -> None:
    skus = _store_skus(db_session, 2)
    duplicate = SKU(tcgplayer_id=skus[0].tcgplayer_id, product_id=skus[0].product_id, language_id=skus[0].language_id)
    db_session.add(duplicate)
    db_session.commit()
    client = FakeTCGPlayer()

    inserted = ingest_prices(db_session, client, settings)

    assert inserted == 3
    assert client.called("list_sku_prices") == [([1000, 1001],)]
    priced = set(db_session.scalars(select(SKUPrice.sku_id)))
    assert priced == {skus[0].id, skus[1].id, duplicate.id}
