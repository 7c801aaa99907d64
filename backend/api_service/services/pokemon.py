import requests


class PokemonLookupError(Exception):
    pass


def get_pokemon(base_url: str, offset: int = 0, timeout: float | None = 10) -> str:
    """Return the name of the pokemon at ``offset`` in PokeAPI's listing."""
    url = f"{base_url.rstrip('/')}/pokemon"
    try:
        resp = requests.get(url, params={'offset': offset, 'limit': 1}, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as exc:
        raise PokemonLookupError(f'there was an error: {exc}') from exc
    except ValueError as exc:
        raise PokemonLookupError(f'PokeAPI returned invalid JSON: {exc}') from exc

    results = payload.get('results') if isinstance(payload, dict) else None
    if not results:
        raise PokemonLookupError(f'no pokemon found at offset {offset}')
    name = results[0].get('name') if isinstance(results[0], dict) else None
    if not name:
        raise PokemonLookupError('PokeAPI result has no name')
    return name
