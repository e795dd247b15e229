"""Generic create/list/update/delete for every content table.

Each entity kind is described once by an :class:`EntitySchema`; the four
operations below are shared by all of them.
"""
import json
import logging
import math

from errors import NotFoundError, ValidationError
from models import (
    db, Post, Casino, Game, GlobalSlot, PokerSite, CasinoCard, BestCasino
)

logger = logging.getLogger(__name__)

TEXT, INT, FLOAT = "text", "int", "float"

# signed 64-bit, the widest INTEGER any backing store accepts
INT_MIN, INT_MAX = -(2 ** 63), 2 ** 63 - 1

_MISSING = object()


# ===== List attributes (payments) =====
def coerce_list(value):
    """Normalize a scalar-or-list form value to a list of non-empty strings."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    return [str(v) for v in items if v is not None and str(v) != ""]


def dump_list(values) -> str:
    return json.dumps(coerce_list(values))


def load_list(raw):
    """Stored JSON text back to a list of strings; anything unreadable is []."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return []
    if not isinstance(data, list):
        return []
    return [x for x in data if isinstance(x, str)]


def _raw_list(data, keys):
    values = []
    for key in keys:
        if hasattr(data, "getlist"):
            values.extend(data.getlist(key))
        elif key in data:
            raw = data[key]
            if isinstance(raw, (list, tuple)):
                values.extend(raw)
            else:
                values.append(raw)
    return values


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _has_file(upload):
    return upload is not None and bool(upload.filename)


# ===== Schema =====
class Field:
    def __init__(self, name, kind=TEXT, aliases=()):
        self.name = name
        self.kind = kind
        self.keys = (name,) + tuple(aliases)

    def lookup(self, data):
        for key in self.keys:
            if key in data:
                return data.get(key)
        return _MISSING

    def coerce(self, value):
        if self.kind == TEXT:
            return None if value is None else str(value)
        if _blank(value):
            return None
        try:
            number = int(value) if self.kind == INT else float(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"{self.name} must be a number.")
        if self.kind == INT and not INT_MIN <= number <= INT_MAX:
            raise ValidationError(f"{self.name} is out of range.")
        if self.kind == FLOAT and not math.isfinite(number):
            raise ValidationError(f"{self.name} must be a finite number.")
        return number


class EntitySchema:
    def __init__(self, name, label, model, fields, order_by, required=(),
                 asset=None, asset_required=False, list_fields=(),
                 required_message="All fields are required.", asset_message=None):
        self.name = name
        self.label = label
        self.model = model
        self.fields = fields
        self.order_by = order_by
        self.required = tuple(required)
        self.asset = asset
        self.asset_required = asset_required
        self.list_fields = tuple(list_fields)
        self.required_message = required_message
        self.asset_message = asset_message or f"{(asset or 'file').capitalize()} upload is required."

    def read(self, data, partial=False):
        """Column values found in the request; absent fields are skipped when partial."""
        values = {}
        for field in self.fields:
            raw = field.lookup(data)
            if raw is _MISSING:
                if partial:
                    continue
                raw = None
            values[field.name] = raw
        return values

    def coerce(self, values):
        coerced = {}
        by_name = {f.name: f for f in self.fields}
        for name, raw in values.items():
            coerced[name] = by_name[name].coerce(raw)
        return coerced

    def read_lists(self, data):
        return {
            name: dump_list(_raw_list(data, (name, f"{name}[]")))
            for name in self.list_fields
        }

    def dump(self, record):
        data = record.to_dict()
        for name in self.list_fields:
            data[name] = load_list(data.get(name))
        return data


POSTS = EntitySchema(
    "post", "Post", Post,
    fields=[Field("title"), Field("content"), Field("link"), Field("category")],
    order_by=(Post.created_at.desc(), Post.id.desc()),
    required=("title", "content"),
    asset="image", asset_required=True,
    required_message="Title, content, and image are required.",
    asset_message="Title, content, and image are required.",
)

CASINOS = EntitySchema(
    "casino", "Casino", Casino,
    fields=[Field("label1"), Field("label2"), Field("country"), Field("website"),
            Field("ranking", INT)],
    order_by=(Casino.ranking.asc(), Casino.id.asc()),
    required=("label1", "label2", "country", "website", "ranking"),
    asset="logo", asset_required=True,
    list_fields=("payments",),
)

GAMES = EntitySchema(
    "game", "Game", Game,
    fields=[Field("title"), Field("link")],
    order_by=(Game.created_at.desc(), Game.id.desc()),
    required=("title", "link"),
    asset="image", asset_required=True,
    required_message="Title, link, and image are required.",
    asset_message="Title, link, and image are required.",
)

GLOBAL_SLOTS = EntitySchema(
    "global_slot", "Global Lucky Slot", GlobalSlot,
    fields=[Field("name"), Field("promo"), Field("score", FLOAT), Field("stars", INT),
            Field("link")],
    order_by=(GlobalSlot.created_at.desc(), GlobalSlot.id.desc()),
    asset="image",
    list_fields=("payments",),
)

POKER_SITES = EntitySchema(
    "poker_site", "Poker site", PokerSite,
    fields=[Field("name"), Field("description"), Field("rating", FLOAT), Field("link")],
    order_by=(PokerSite.rating.desc(), PokerSite.id.asc()),
    required=("name", "description", "rating", "link"),
    asset="logo", asset_required=True,
    asset_message="All fields are required.",
)

CASINO_CARDS = EntitySchema(
    "casino_card", "Casino card", CasinoCard,
    fields=[Field("name"),
            Field("safety_index", FLOAT, aliases=("safetyIndex",)),
            Field("features"),
            Field("bonus"),
            Field("terms_link", aliases=("termsLink",)),
            Field("visit_link", aliases=("visitLink",)),
            Field("review_link", aliases=("reviewLink",)),
            Field("rank", INT)],
    order_by=(CasinoCard.rank.asc(), CasinoCard.id.asc()),
    required=("name", "safety_index", "features", "bonus", "visit_link", "review_link"),
    asset="image", asset_required=True,
    asset_message="All fields are required.",
)

BEST_CASINOS = EntitySchema(
    "best_casino", "Best Casino", BestCasino,
    fields=[Field("promo"), Field("code"), Field("min_deposit"), Field("wagering"),
            Field("rating", FLOAT), Field("link")],
    order_by=(BestCasino.rating.desc(), BestCasino.id.asc()),
    required=("promo", "code", "min_deposit", "wagering", "rating", "link"),
    asset="logo", asset_required=True,
    asset_message="All fields are required.",
)

SCHEMAS = [POSTS, CASINOS, GAMES, GLOBAL_SLOTS, POKER_SITES, CASINO_CARDS, BEST_CASINOS]


# ===== Operations =====
def _get_or_404(schema, record_id):
    try:
        key = int(record_id)
    except (TypeError, ValueError):
        key = None
    if key is None or not INT_MIN <= key <= INT_MAX:
        raise NotFoundError(f"{schema.label} not found.")
    record = db.session.get(schema.model, key)
    if record is None:
        raise NotFoundError(f"{schema.label} not found.")
    return record


def create_record(schema, data, upload, store):
    """Insert one row; the upload is written only after presence checks pass."""
    values = schema.read(data)
    if any(_blank(values[name]) for name in schema.required):
        raise ValidationError(schema.required_message)
    if schema.asset_required and not _has_file(upload):
        raise ValidationError(schema.asset_message)

    values = schema.coerce(values)
    values.update(schema.read_lists(data))

    path = store.save(upload) if schema.asset and _has_file(upload) else None
    if schema.asset:
        values[schema.asset] = path

    record = schema.model(**values)
    try:
        db.session.add(record)
        db.session.commit()
    except Exception:
        db.session.rollback()
        store.remove(path)
        raise

    logger.info("Created %s %s", schema.name, record.id)
    return record.id


def list_records(schema, **filters):
    stmt = db.select(schema.model).filter_by(**filters).order_by(*schema.order_by)
    return [schema.dump(r) for r in db.session.execute(stmt).scalars().all()]


def update_record(schema, record_id, data, upload, store):
    """Overwrite supplied fields; keep the stored asset path unless a new file is sent."""
    record = _get_or_404(schema, record_id)

    values = schema.coerce(schema.read(data, partial=True))
    values.update(schema.read_lists(data))

    path = None
    if schema.asset and _has_file(upload):
        path = store.save(upload)
        values[schema.asset] = path

    for name, value in values.items():
        setattr(record, name, value)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        store.remove(path)
        raise

    logger.info("Updated %s %s", schema.name, record.id)


def delete_record(schema, record_id, store):
    record = _get_or_404(schema, record_id)

    if schema.asset:
        path = getattr(record, schema.asset)
        if path:
            store.remove(path)

    db.session.delete(record)
    db.session.commit()
    logger.info("Deleted %s %s", schema.name, record_id)
