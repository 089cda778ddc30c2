import pytest
from sqlalchemy.exc import OperationalError

from sqlalchemy_record import BindingCountError, RecordQuery

from helpers import of_kind
from models import Post, User


class TestSelect:
    def test_where_order_by(self, session, seeded):
        posts = session.query(Post).where("id < ?", [3]).order_by("id DESC").all()

        assert [post.id for post in posts] == [2, 1]
        assert all(isinstance(post, Post) for post in posts)
        assert posts[0].title == "post 2"
        assert posts[0].body == "body 2"

    def test_class_query(self, session, seeded):
        query = Post.query()
        assert isinstance(query, RecordQuery)

        posts = query.order_by("id").all()
        assert len(posts) == 4

    def test_first(self, session, seeded):
        post = Post.query().order_by("id DESC").first()

        assert post is not None
        assert post.id == 4

    def test_first_no_match(self, session, seeded):
        assert Post.query().where("id > ?", [100]).first() is None

    def test_first_empty_table(self, session):
        assert User.query().first() is None

    def test_all_no_match(self, session, seeded):
        assert Post.query().where("title = ?", ["nope"]).all() == []

    def test_limit(self, session, seeded):
        posts = Post.query().order_by("id").limit(2).all()
        assert [post.id for post in posts] == [1, 2]

        assert Post.query().limit(0).all() == []

    def test_iteration(self, session, seeded):
        assert sorted(post.id for post in Post.query()) == [1, 2, 3, 4]

    def test_reexecution(self, session, seeded):
        query = Post.query().where("id >= ?", [3]).order_by("id")

        first_run = [post.id for post in query.all()]
        second_run = [post.id for post in query.all()]
        assert first_run == second_run == [3, 4]

    def test_binding_count_mismatch(self, session, seeded, statements):
        with pytest.raises(BindingCountError):
            Post.query().where("id < ? AND id > ?", [3]).all()

        with pytest.raises(BindingCountError):
            Post.query().where("id < 3", [3]).all()

        assert of_kind(statements, "SELECT") == []

    def test_later_where_replaces_bindings(self, session, seeded):
        query = Post.query().where("id > ?", [1]).where("id < ?", [4])

        assert query.bindings == [4]
        with pytest.raises(BindingCountError):
            query.all()

    def test_where_without_bindings(self, session, seeded):
        posts = (
            Post.query()
            .where("id > ?", [1])
            .where("title != 'post 3'")
            .order_by("id")
            .all()
        )
        assert [post.id for post in posts] == [2, 4]

    def test_question_mark_in_literal(self, session, seeded):
        posts = Post.query().where("title = '?' OR id = ?", [1]).all()
        assert [post.id for post in posts] == [1]

    def test_bindings_are_sent_in_order(self, session, seeded, statements):
        Post.query().where("id > ? AND title != ?", [1, "post 2"]).all()

        selects = of_kind(statements, "SELECT")
        assert len(selects) == 1
        assert selects[0][1] == (1, "post 2")

    def test_malformed_predicate(self, session, seeded):
        with pytest.raises(OperationalError):
            Post.query().where("id <<>> ?", [1]).all()

    def test_sql(self, session):
        query = Post.query().where("id = ?", [1]).limit(1)

        assert query.sql == "SELECT posts.* FROM posts WHERE id = ? LIMIT 1"
        assert query.bindings == [1]

    def test_multi_table_select(self, session, seeded):
        peter = User.create(name="Peter")
        post = Post.get(2)
        post.update(user_id=peter.id)

        rows = (
            Post.query()
            .select("users", ["name"])
            .where("posts.user_id = users.id")
            .all()
        )

        assert len(rows) == 1
        assert rows[0].id == 2
        assert rows[0].users_name == "Peter"

    def test_joined_columns_keep_root_primary_key(self, session, seeded):
        peter = User.create(name="Peter")
        Post.get(2).update(user_id=peter.id)

        row, = (
            Post.query()
            .select("users", ["id"])
            .where("posts.user_id = users.id")
            .all()
        )
        assert row.id == 2
        assert row.users_id == peter.id
        assert row.to_dict()["id"] == 2

        row.update(title="edited")

        assert Post.get(2).title == "edited"
        assert Post.get(1).title == "post 1"
        assert Post.get(1).body == "body 1"

    def test_get(self, session, seeded):
        post = session.get(Post, 3)
        assert post is not None
        assert post.title == "post 3"

        assert Post.get(3).id == 3
        assert Post.get(42) is None
