"""EntryStore：日记 / 标签 / 分类 / 用户的数据访问层。

说明：
- 只做“按条件取数 / 计数 / 增删改”，不做业务判断（归属、校验、冲突都在 service 层）；
- 写操作只 flush，不 commit：由调用方（service 操作边界）决定何时提交；
- 按 id 删除不存在的记录是静默 no-op。
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Category, Entry, EntrySecondaryMood, EntryTag, Tag, User
from ..moods import Mood
from ..utils.dates import month_bounds, utc_now

_LIKE_ESCAPE = "\\"


def _escape_like_term(value: str) -> str:
    """转义 LIKE 模式中的特殊字符，避免用户输入意外触发通配或转义。"""
    if not value:
        return ""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _date_range_clauses(date_from: date | None, date_to: date | None) -> list:
    clauses = []
    if date_from is not None:
        clauses.append(Entry.entry_date >= date_from)
    if date_to is not None:
        clauses.append(Entry.entry_date <= date_to)
    return clauses


def build_entry_filters(
    *,
    user_id: str,
    text: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    moods: Iterable[Mood] | None = None,
    tag_ids: Iterable[str] | None = None,
    category_id: str | None = None,
) -> list:
    """构造日记筛选条件（条件之间 AND，同一条件内 OR）。

    - text：标题或正文包含（不区分大小写）；空白视为不过滤
    - moods / tag_ids：空集合视为不过滤
    - 始终限定 user_id，避免跨用户泄露
    """
    clauses = [Entry.user_id == user_id]

    q_text = (text or "").strip()
    if q_text:
        pattern = f"%{_escape_like_term(q_text)}%"
        clauses.append(
            func.coalesce(Entry.title, "").ilike(pattern, escape=_LIKE_ESCAPE)
            | func.coalesce(Entry.body, "").ilike(pattern, escape=_LIKE_ESCAPE)
        )

    clauses.extend(_date_range_clauses(date_from, date_to))

    mood_list = list(dict.fromkeys(moods or []))
    if mood_list:
        clauses.append(Entry.primary_mood.in_(mood_list))

    tag_list = [t for t in dict.fromkeys(tag_ids or []) if t]
    if tag_list:
        clauses.append(
            select(1)
            .select_from(EntryTag)
            .where(EntryTag.entry_id == Entry.id, EntryTag.tag_id.in_(tag_list))
            .exists()
        )

    if category_id:
        clauses.append(Entry.category_id == category_id)

    return clauses


class EntryStore:
    """基于 AsyncSession 的存储实现"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ---- Entry ----

    async def get_entry_by_id(self, entry_id: str) -> Entry | None:
        return await self.db.scalar(select(Entry).where(Entry.id == entry_id))

    async def get_entry_by_date(self, user_id: str, day: date) -> Entry | None:
        return await self.db.scalar(
            select(Entry)
            .where(Entry.user_id == user_id, Entry.entry_date == day)
            .order_by(Entry.created_at.asc(), Entry.id.asc())
            .limit(1)
        )

    async def add_entry(self, entry: Entry) -> Entry:
        now = utc_now()
        entry.created_at = now
        entry.updated_at = now
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def update_entry(self, entry: Entry) -> Entry:
        entry.updated_at = utc_now()
        await self.db.flush()
        return entry

    async def delete_entry(self, entry_id: str) -> None:
        entry = await self.get_entry_by_id(entry_id)
        if entry is None:
            return
        await self.db.delete(entry)
        await self.db.flush()

    def set_secondary_moods(self, entry: Entry, moods: Iterable[Mood]) -> None:
        """按差异更新次要心情（保留已存在的行，避免同主键先插后删冲突）。"""
        desired = set(Mood(m) for m in moods)
        rows = list(entry.secondary_mood_rows)
        existing = {Mood(r.mood) for r in rows}
        for row in rows:
            if Mood(row.mood) not in desired:
                entry.secondary_mood_rows.remove(row)
        for mood in Mood:
            if mood in desired and mood not in existing:
                entry.secondary_mood_rows.append(EntrySecondaryMood(mood=mood))

    async def list_entries(self, filters: list, *, skip: int, take: int) -> list[Entry]:
        query = (
            select(Entry)
            .where(*filters)
            .order_by(Entry.entry_date.desc(), Entry.id.desc())
            .offset(skip)
            .limit(take)
        )
        result = await self.db.scalars(query)
        return list(result.all())

    async def count_entries(self, filters: list) -> int:
        total = await self.db.scalar(select(func.count()).select_from(Entry).where(*filters))
        return int(total or 0)

    async def count_user_entries(self, user_id: str) -> int:
        return await self.count_entries([Entry.user_id == user_id])

    async def list_entry_dates(
        self,
        user_id: str,
        *,
        year: int | None = None,
        month: int | None = None,
    ) -> list[date]:
        """某用户有日记的日期（去重、升序）；传 year+month 时只取该月。"""
        query = select(Entry.entry_date).where(Entry.user_id == user_id)
        if year is not None and month is not None:
            first, last = month_bounds(year, month)
            query = query.where(Entry.entry_date >= first, Entry.entry_date <= last)
        query = query.distinct().order_by(Entry.entry_date.asc())
        result = await self.db.scalars(query)
        return [d for d in result.all() if d is not None]

    async def has_entry_for_date(self, user_id: str, day: date) -> bool:
        found = await self.db.scalar(
            select(Entry.id).where(Entry.user_id == user_id, Entry.entry_date == day).limit(1)
        )
        return found is not None

    # ---- Analytics ----

    async def mood_counts(
        self,
        user_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[tuple[Mood, int]]:
        result = await self.db.execute(
            select(Entry.primary_mood, func.count(Entry.id))
            .where(Entry.user_id == user_id, *_date_range_clauses(date_from, date_to))
            .group_by(Entry.primary_mood)
        )
        return [(Mood(mood), int(count)) for mood, count in result.all() if mood is not None]

    async def tag_usage_counts(
        self,
        user_id: str,
        date_from: date | None = None,
        date_to: date | None = None,
        *,
        top_n: int,
    ) -> list[tuple[str, int]]:
        usage = func.count(EntryTag.tag_id).label("usage")
        result = await self.db.execute(
            select(Tag.name, usage)
            .select_from(EntryTag)
            .join(Tag, EntryTag.tag_id == Tag.id)
            .join(Entry, EntryTag.entry_id == Entry.id)
            .where(Entry.user_id == user_id, *_date_range_clauses(date_from, date_to))
            .group_by(Tag.name)
            .order_by(usage.desc(), Tag.name.asc())
            .limit(top_n)
        )
        return [(str(name), int(count)) for name, count in result.all()]

    async def list_entry_bodies(
        self,
        user_id: str,
        date_from: date,
        date_to: date,
    ) -> list[tuple[date, str]]:
        """(entry_date, body) 列表；字数不落库，由调用方现算。"""
        result = await self.db.execute(
            select(Entry.entry_date, Entry.body)
            .where(Entry.user_id == user_id, *_date_range_clauses(date_from, date_to))
            .order_by(Entry.entry_date.asc())
        )
        return [(d, body or "") for d, body in result.all()]

    # ---- Tag ----

    async def list_tags(self) -> list[Tag]:
        result = await self.db.scalars(select(Tag).order_by(Tag.name.asc()))
        return list(result.all())

    async def list_prebuilt_tags(self) -> list[Tag]:
        result = await self.db.scalars(
            select(Tag).where(Tag.is_prebuilt.is_(True)).order_by(Tag.name.asc())
        )
        return list(result.all())

    async def get_tag_by_id(self, tag_id: str) -> Tag | None:
        return await self.db.scalar(select(Tag).where(Tag.id == tag_id))

    async def get_tag_by_name(self, name: str) -> Tag | None:
        return await self.db.scalar(select(Tag).where(Tag.name == name))

    async def tag_exists(self, name: str) -> bool:
        return await self.get_tag_by_name(name) is not None

    async def add_tag(self, tag: Tag) -> Tag:
        self.db.add(tag)
        await self.db.flush()
        return tag

    async def get_or_create_tag(self, name: str) -> Tag:
        tag = await self.get_tag_by_name(name)
        if tag is not None:
            return tag
        return await self.add_tag(Tag(name=name, is_prebuilt=False))

    async def delete_tag(self, tag_id: str) -> None:
        tag = await self.get_tag_by_id(tag_id)
        if tag is None:
            return
        # 走 ORM 集合移除关联（delete-orphan），保证会话里已加载的日记同步更新
        result = await self.db.scalars(
            select(Entry).where(Entry.tag_links.any(EntryTag.tag_id == tag_id))
        )
        for entry in result.all():
            for link in [x for x in entry.tag_links if x.tag_id == tag_id]:
                entry.tag_links.remove(link)
        await self.db.flush()
        await self.db.delete(tag)
        await self.db.flush()

    # ---- Category ----

    async def list_categories(self) -> list[Category]:
        result = await self.db.scalars(select(Category).order_by(Category.name.asc()))
        return list(result.all())

    async def get_category_by_id(self, category_id: str) -> Category | None:
        return await self.db.scalar(select(Category).where(Category.id == category_id))

    async def get_category_by_name(self, name: str) -> Category | None:
        return await self.db.scalar(
            select(Category).where(Category.name == name).order_by(Category.id.asc()).limit(1)
        )

    async def add_category(self, category: Category) -> Category:
        self.db.add(category)
        await self.db.flush()
        return category

    async def update_category(self, category: Category) -> Category:
        await self.db.flush()
        return category

    async def delete_category(self, category_id: str) -> None:
        category = await self.get_category_by_id(category_id)
        if category is None:
            return
        # 先解除引用（不依赖数据库的 ON DELETE SET NULL）
        result = await self.db.scalars(select(Entry).where(Entry.category_id == category_id))
        for entry in result.all():
            entry.category = None
        await self.db.flush()
        await self.db.delete(category)
        await self.db.flush()

    # ---- User ----

    async def get_user_by_id(self, user_id: str) -> User | None:
        return await self.db.scalar(select(User).where(User.id == user_id))

    async def get_user_by_username(self, username: str) -> User | None:
        return await self.db.scalar(select(User).where(User.username == username))

    async def list_users(self) -> list[User]:
        result = await self.db.scalars(select(User).order_by(User.username.asc()))
        return list(result.all())

    async def add_user(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        return user

    async def delete_user(self, user_id: str) -> None:
        user = await self.get_user_by_id(user_id)
        if user is None:
            return
        # 逐条删除，由 Entry 的级联一并删掉标签关联与次要心情
        result = await self.db.scalars(select(Entry).where(Entry.user_id == user_id))
        for entry in result.all():
            await self.db.delete(entry)
        await self.db.flush()
        await self.db.delete(user)
        await self.db.flush()
