import re
from typing import Iterable, List, Optional, Union


def slugify(value: Optional[str]) -> str:
    """
    Construit le slug d'un article à partir de son titre :
    - passe en minuscules
    - remplace chaque suite d'espaces par un tiret
    - supprime tout caractère hors [a-z0-9-]
    Exemple: 'Hello, World! 2024' -> 'hello-world-2024'
    """
    if value is None:
        return ""
    s = str(value).lower()
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"[^a-z0-9-]", "", s)
    return s


def split_list(value: Union[str, Iterable[str], None]) -> List[str]:
    """
    Convertit la saisie 'a, b, c' (tags, mots-clés) en liste.
    Les entrées vides sont ignorées.
    """
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]
