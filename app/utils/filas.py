from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func


def fila_a_dict(instancia) -> Dict[str, Any]:
    """Convierte una instancia de modelo SQLAlchemy en un diccionario columna -> valor."""
    if instancia is None:
        return {}
    return {columna.name: getattr(instancia, columna.name) for columna in instancia.__table__.columns}


def filas_a_dicts(instancias: Iterable) -> List[Dict[str, Any]]:
    return [fila_a_dict(instancia) for instancia in instancias]


def ordenar_consulta(query, modelo, orden: Optional[Iterable[str]] = None):
    """Aplica el orden natural del modelo (__orden__); un '-' al inicio indica descendente."""
    for campo in orden or getattr(modelo, "__orden__", ()):
        if campo.startswith("-"):
            query = query.order_by(getattr(modelo, campo[1:]).desc())
        else:
            query = query.order_by(getattr(modelo, campo))
    return query


def siguiente_id(db, modelo, campo: str) -> int:
    """Id local de la sede: máximo existente + 1 (no hay secuencia global entre sedes)."""
    maximo = db.query(func.max(getattr(modelo, campo))).scalar()
    return (maximo or 0) + 1
