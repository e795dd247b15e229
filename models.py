from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()

# Post category tags served by the fixed /api/posts/<alias> routes
POST_CATEGORIES = {
    "casino-news": "casino_betting_news",
    "featured-news": "featured_news",
}


class RecordMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Flat dict of every column; datetimes as ISO-8601 strings."""
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[column.key] = value
        return data


class User(RecordMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)  # werkzeug hash, never plaintext


class Post(RecordMixin, db.Model):
    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    link = db.Column(db.String(500))
    image = db.Column(db.String(400))     # /uploads/<file>
    category = db.Column(db.String(80), index=True)  # e.g. 'casino_betting_news'


class Casino(RecordMixin, db.Model):
    __tablename__ = "casinos"

    id = db.Column(db.Integer, primary_key=True)
    label1 = db.Column(db.String(255))
    label2 = db.Column(db.String(255))
    country = db.Column(db.String(80))
    website = db.Column(db.String(500))
    logo = db.Column(db.String(400))
    payments = db.Column(db.Text)  # JSON list of strings
    ranking = db.Column(db.Integer)


class Game(RecordMixin, db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255))
    link = db.Column(db.String(500))
    image = db.Column(db.String(400))


class GlobalSlot(RecordMixin, db.Model):
    __tablename__ = "global_slots"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255))
    promo = db.Column(db.String(255))
    score = db.Column(db.Float)
    stars = db.Column(db.Integer)
    link = db.Column(db.String(500))
    image = db.Column(db.String(400))
    payments = db.Column(db.Text)  # JSON list of strings


class PokerSite(RecordMixin, db.Model):
    __tablename__ = "poker_sites"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255))
    description = db.Column(db.Text)
    rating = db.Column(db.Float)
    link = db.Column(db.String(500))
    logo = db.Column(db.String(400))


class CasinoCard(RecordMixin, db.Model):
    __tablename__ = "casino_cards"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255))
    safety_index = db.Column(db.Float)
    features = db.Column(db.Text)
    bonus = db.Column(db.String(255))
    terms_link = db.Column(db.String(500))
    visit_link = db.Column(db.String(500))
    review_link = db.Column(db.String(500))
    image = db.Column(db.String(400))
    rank = db.Column(db.Integer)


class BestCasino(RecordMixin, db.Model):
    __tablename__ = "best_casinos"

    id = db.Column(db.Integer, primary_key=True)
    promo = db.Column(db.String(255))
    code = db.Column(db.String(80))
    min_deposit = db.Column(db.String(80))
    wagering = db.Column(db.String(80))
    rating = db.Column(db.Float)
    link = db.Column(db.String(500))
    logo = db.Column(db.String(400))
