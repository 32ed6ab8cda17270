class AnalyticsError(Exception):
    """Базовая ошибка аналитического движка."""


class UnknownTable(AnalyticsError):
    def __init__(self, name: str, known=()):
        self.name = name
        known_list = ", ".join(sorted(known)) or "none"
        super().__init__(f"Unknown table {name!r} (known tables: {known_list})")


class UnknownColumn(AnalyticsError):
    def __init__(self, name: str, available=()):
        self.name = name
        available_list = ", ".join(available) or "none"
        super().__init__(f"Unknown column {name!r} (available: {available_list})")


class TypeMismatch(AnalyticsError):
    pass


class UnorderedWindow(AnalyticsError):
    """Оконная функция со смещением (LAG) без детерминированного порядка."""
