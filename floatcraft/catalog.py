"""
Skin catalog and listing loaders. Builds Outcome templates and InputSkin
pools from local exports.

Catalog JSON layout:
    {"collections": {"<collection>": {"skins": [
        {"name": ..., "rarity": ..., "min_wear": ..., "max_wear": ...}, ...]}}}

All catalog methods are read-only. Malformed entries are logged and skipped.
"""
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import orjson
import pandas as pd

from floatcraft.constants import Currency, next_rarity
from floatcraft.errors import InvalidJob
from floatcraft.models import FloatRange, InputSkin, Outcome

logger = logging.getLogger(__name__)


def parse_currency(value: Union[str, int, None]) -> Currency:
    """Currency from a numeric code or a name ("USD", "eur"). Defaults to USD."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return Currency.USD
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return Currency(int(text))
        try:
            return Currency[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown currency '{value}'") from None
    return Currency(int(value))


class SkinCatalog:
    """Queryable collection -> skins mapping loaded from a JSON catalog."""

    def __init__(self, collections: dict[str, list[dict]]):
        # collection name -> [{"name", "rarity", "wear_range"}]
        self._collections: dict[str, list[dict]] = {}
        for collection, skins in collections.items():
            parsed = []
            for raw in skins:
                entry = self._parse_skin(collection, raw)
                if entry is not None:
                    parsed.append(entry)
            self._collections[collection] = parsed

    @classmethod
    def load(cls, path: Path) -> "SkinCatalog":
        raw = orjson.loads(Path(path).read_bytes())
        collections = {
            name: body.get("skins", [])
            for name, body in raw.get("collections", {}).items()
        }
        catalog = cls(collections)
        logger.info("Loaded %d collections (%d skins) from %s",
                    len(catalog), sum(len(s) for s in catalog._collections.values()), path)
        return catalog

    @staticmethod
    def _parse_skin(collection: str, raw: dict) -> Optional[dict]:
        try:
            return {
                "name": raw["name"],
                "rarity": raw["rarity"],
                "wear_range": FloatRange(min=float(raw.get("min_wear", 0.0)),
                                         max=float(raw.get("max_wear", 1.0))),
            }
        except (KeyError, TypeError, ValueError, InvalidJob) as e:
            logger.warning("Skipping malformed skin in '%s': %s (%s)", collection, raw, e)
            return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def collections(self) -> list[str]:
        return sorted(self._collections)

    def skins_in(self, collection: str, rarity: Optional[str] = None) -> list[dict]:
        skins = self._collections.get(collection, [])
        if rarity is None:
            return list(skins)
        return [s for s in skins if s["rarity"] == rarity]

    def find_collection(self, skin_name: str) -> Optional[str]:
        for collection, skins in self._collections.items():
            if any(s["name"] == skin_name for s in skins):
                return collection
        return None

    def outcomes_for(self, collection: str, input_rarity: str) -> tuple[Outcome, ...]:
        """Outcome templates a craft of `input_rarity` items from `collection`
        can produce (the next rarity tier up)."""
        target = next_rarity(input_rarity)
        if target is None:
            return ()
        return tuple(
            Outcome(name=s["name"], collection=collection, wear_range=s["wear_range"])
            for s in self.skins_in(collection, target)
        )

    def outcomes_for_collections(self, collections: Iterable[str],
                                 input_rarity: str) -> tuple[Outcome, ...]:
        seen: set[tuple[str, str]] = set()
        out: list[Outcome] = []
        for collection in collections:
            for o in self.outcomes_for(collection, input_rarity):
                if (o.collection, o.name) not in seen:
                    seen.add((o.collection, o.name))
                    out.append(o)
        return tuple(out)

    def __len__(self) -> int:
        return len(self._collections)


# ---------------------------------------------------------------------------
# Listing pools
# ---------------------------------------------------------------------------

def _rows_to_pool(rows: Iterable[dict], source: Union[str, Path]) -> list[InputSkin]:
    pool: list[InputSkin] = []
    for n, row in enumerate(rows):
        try:
            name = row.get("name")
            pool.append(InputSkin(
                wear=float(row["wear"]),
                price=float(row["price"]),
                currency=parse_currency(row.get("currency")),
                name="" if name is None or pd.isna(name) else str(name),
            ))
        except (KeyError, TypeError, ValueError, InvalidJob) as e:
            logger.warning("Skipping listing %d in %s: %s", n, source, e)
    return pool


def load_pool_csv(path: Path) -> list[InputSkin]:
    """Pool from a CSV export with columns wear, price[, currency][, name]."""
    df = pd.read_csv(path)
    missing = {"wear", "price"} - set(df.columns)
    if missing:
        raise ValueError(f"{path}: missing column(s) {', '.join(sorted(missing))}")
    pool = _rows_to_pool(df.to_dict(orient="records"), path)
    logger.info("Loaded %d/%d listings from %s", len(pool), len(df), path)
    return pool


def load_pool_json(path: Path) -> list[InputSkin]:
    """Pool from a JSON array of {wear, price[, currency][, name]} objects."""
    raw = orjson.loads(Path(path).read_bytes())
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON array of listings")
    pool = _rows_to_pool(raw, path)
    logger.info("Loaded %d/%d listings from %s", len(pool), len(raw), path)
    return pool
