def of_kind(statements, keyword):
    """
    Keep the captured statements starting with ``keyword`` (INSERT, UPDATE, ...).
    """
    return [
        (sql, params)
        for sql, params in statements
        if sql.lstrip().upper().startswith(keyword)
    ]
