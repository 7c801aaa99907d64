"""Per-game score tables.

Each game keeps its own table (``pokemon_scores``, ``beemoviebot`` ...) with
one row per user. Tables are created and dropped at runtime, so they are
described with SQLAlchemy Core rather than declared as models.
"""

import re
from typing import Any, List

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError, NoSuchTableError, SQLAlchemyError

from api_service import db

IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


class ScoreStoreError(Exception):
    pass


class InvalidIdentifierError(ScoreStoreError):
    pass


class TableNotFoundError(ScoreStoreError):
    pass


class UserNotFoundError(ScoreStoreError):
    pass


class DuplicateUserError(ScoreStoreError):
    pass


class TableConflictError(ScoreStoreError):
    pass


def _identifier(value: Any, what: str) -> str:
    if not value or not isinstance(value, str):
        raise InvalidIdentifierError(f'the {what} must not be empty')
    if not IDENTIFIER_RE.match(value):
        raise InvalidIdentifierError(f'invalid {what}: {value!r}')
    return value


def _score_table(name: str, metadata: sa.MetaData) -> sa.Table:
    return sa.Table(
        name,
        metadata,
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('username', sa.String(64), unique=True, nullable=False),
        sa.Column('score', sa.Integer, nullable=False, default=0, server_default='0'),
        sa.Column('answer', sa.Text, nullable=True),
    )


def _reflect(table_name: str) -> sa.Table:
    name = _identifier(table_name, 'table name')
    try:
        return sa.Table(name, sa.MetaData(), autoload_with=db.engine)
    except NoSuchTableError as exc:
        raise TableNotFoundError(f'table {name} does not exist') from exc


def _is_score_table(table: sa.Table) -> bool:
    return all(name in table.c for name in ('id', 'username', 'score'))


def _reflect_score_table(table_name: str) -> sa.Table:
    table = _reflect(table_name)
    if not _is_score_table(table):
        raise TableNotFoundError(f'{table.name} is not a score table')
    return table


def _column(table: sa.Table, label: Any) -> sa.Column:
    name = _identifier(label, 'column name')
    # Labels arrive upper-cased from older clients ("SCORE")
    for column in table.columns:
        if column.name.lower() == name.lower():
            return column
    raise InvalidIdentifierError(f'table {table.name} has no column {name}')


def ping() -> None:
    with db.engine.connect() as conn:
        conn.execute(sa.text('SELECT 1'))


def list_tables() -> List[str]:
    names = sorted(sa.inspect(db.engine).get_table_names())
    if not names:
        raise TableNotFoundError('there are no tables in the database')
    return names


def create_table(table_name: str) -> str:
    name = _identifier(table_name, 'table name')
    if sa.inspect(db.engine).has_table(name):
        if not _is_score_table(_reflect(name)):
            raise TableConflictError(f'table {name} already exists and is not a score table')
        return f'{name} successfully created.'
    _score_table(name, sa.MetaData()).create(db.engine, checkfirst=True)
    return f'{name} successfully created.'


def delete_table(table_name: str) -> str:
    table = _reflect(table_name)
    table.drop(db.engine)
    return f'{table.name} successfully deleted.'


def add_user(table_name: str, username: str) -> str:
    table = _reflect_score_table(table_name)
    if not isinstance(username, str) or not username:
        raise InvalidIdentifierError('the user must be a non-empty string')
    try:
        with db.engine.begin() as conn:
            conn.execute(table.insert().values(username=username, score=0))
    except IntegrityError as exc:
        raise DuplicateUserError(f'{username} is already in {table.name}') from exc
    return f'The table {table.name} was updated'


def get_current_score(table_name: str, username: str) -> int:
    table = _reflect_score_table(table_name)
    with db.engine.connect() as conn:
        score = conn.execute(
            sa.select(table.c.score).where(table.c.username == username)
        ).scalar_one_or_none()
    if score is None:
        raise UserNotFoundError(f'{username} is not in {table.name}')
    return int(score)


def update_score_for_user(table_name: str, username: str, score: int, column: str = 'score') -> str:
    table = _reflect_score_table(table_name)
    target = _column(table, column or 'score')
    if not isinstance(username, str) or not username:
        raise InvalidIdentifierError('the user must be a non-empty string')
    if not isinstance(target.type, sa.Integer):
        raise InvalidIdentifierError(f'column {target.name} does not hold a score')
    with db.engine.begin() as conn:
        result = conn.execute(
            table.update()
            .where(table.c.username == username)
            .values({target.name: target + int(score)})
        )
    if result.rowcount == 0:
        raise UserNotFoundError(f'{username} is not in {table.name}')
    return 'the score for the user has been updated'


def put_answer(table_name: str, answer: str, column: str, second_column: str, num_in_array: int) -> str:
    table = _reflect_score_table(table_name)
    target = _column(table, column)
    key = _column(table, second_column)
    if answer is None or answer == '':
        raise InvalidIdentifierError('the answer must not be empty')
    try:
        with db.engine.begin() as conn:
            result = conn.execute(
                table.update().where(key == num_in_array).values({target.name: answer})
            )
    except SQLAlchemyError as exc:
        raise ScoreStoreError(f'could not store answer in {table.name}: {exc}') from exc
    if result.rowcount == 0:
        raise UserNotFoundError(f'no row in {table.name} where {key.name} = {num_in_array}')
    return answer


def read_answer(table_name: str, column: str) -> str:
    table = _reflect_score_table(table_name)
    target = _column(table, column)
    with db.engine.connect() as conn:
        answer = conn.execute(
            sa.select(target).where(target.is_not(None)).order_by(table.c.id).limit(1)
        ).scalar_one_or_none()
    if answer is None:
        raise UserNotFoundError(f'no answer stored in {table.name}.{target.name}')
    return str(answer)


def leaderboard(table_name: str) -> str:
    table = _reflect_score_table(table_name)
    with db.engine.connect() as conn:
        rows = conn.execute(
            sa.select(table.c.username, table.c.score).order_by(table.c.score.desc(), table.c.username)
        ).all()
    return ''.join(f'{username}: {score}\n' for username, score in rows)
