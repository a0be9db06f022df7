import inspect


async def resolve(value):
    """Await `value` if it is awaitable, otherwise hand it back untouched."""
    if inspect.isawaitable(value):
        return await value
    return value
