from src.driving_school.driving_school.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use


def test_splitter_skips_comments_and_keeps_quoted_semicolons():
    sql = """
    -- clients
    INSERT INTO clients(name, notes) VALUES('Mia', 'prefers; mornings');
    INSERT INTO clients(name) VALUES("Noah")
    """

    statements = list(_iter_sql_statements(sql))

    assert len(statements) == 2
    assert "prefers; mornings" in statements[0]
    assert statements[1].endswith('VALUES("Noah")')


def test_create_database_and_use_are_dropped():
    sql = "CREATE DATABASE driving_school;\nUSE driving_school;\nCREATE TABLE t (id INT);"

    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]
