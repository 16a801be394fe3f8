# backEnd/app/services/empleado_service.py
"""
Empleado compuesto: la información está fragmentada por sede_taller y la nómina está
replicada en todas las sedes.

Al crear, la información (fragmento) va primero: si la réplica de la nómina falla queda
un empleado visible e incompleto, nunca una nómina huérfana. Al actualizar o eliminar se
usa la sede guardada del empleado, no la que llega en la petición; cambiar de sede es una
transferencia explícita.
"""
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from ..models import EmpleadoNomina
from ..models.enums import Entidad, SedeEnum
from ..schemas.empleado import EmpleadoCreate, EmpleadoUpdate, NominaUpdate
from ..schemas.respuesta import Respuesta, ResultadoSede
from ..utils.filas import fila_a_dict
from .agregacion import buscar_en_fragmentos, consulta_por, leer_todas, leer_una, localizar
from .clasificador import (
    ClaveDuplicada,
    DatosInvalidos,
    FalloSede,
    RegistroNoEncontrado,
    SedesInaccesibles,
)
from .fragmentacion import EnrutadorFragmentos, normalizar_sede
from .nodos import en_sede
from .replicacion import actualizar, eliminar, escribir_en_todas, insertar

logger = logging.getLogger(__name__)

CAMPOS_NOMINA = ("fecha_comienzo", "salario")


def _modelo_informacion(registro, sede: SedeEnum):
    return EnrutadorFragmentos(registro.sedes).resolver(Entidad.empleado_informacion, sede).modelo(sede)


async def localizar_empleado(registro, cedula: str) -> Tuple[Optional[SedeEnum], Optional[Dict[str, Any]]]:
    """
    Sede que guarda la información del empleado y su fila, o (None, None) si todas las
    sedes respondieron sin encontrarlo. Con una sede caída y sin coincidencias en las
    demás se propaga su FalloSede en vez de un "no encontrado".
    """
    sede, filas = await localizar(registro, Entidad.empleado_informacion, consulta_por(cedula_empleado=cedula))
    return sede, (filas[0] if filas else None)


async def obtener_empleados(registro) -> Respuesta:
    try:
        lectura = await leer_todas(registro, Entidad.empleado_informacion)
    except SedesInaccesibles as e:
        return Respuesta(success=False, message=e.message, data=[], errorDetails=e.error_details())
    return Respuesta(
        success=True,
        message=f"{len(lectura.filas)} empleados obtenidos de {len(lectura.sedes_consultadas)} sede(s)",
        data=lectura.filas,
        detalles=lectura.detalles(),
    )


async def obtener_empleados_por_sede(registro, sede: str) -> Respuesta:
    empleados = await leer_una(registro, Entidad.empleado_informacion, sede)
    return Respuesta(success=True, message=f"{len(empleados)} empleados en la sede", data=empleados)


def _consulta_nomina_completa(db: Session, modelo) -> List[Dict[str, Any]]:
    # La nómina replicada vive en la misma sede que el fragmento de información
    filas = (
        db.query(modelo, EmpleadoNomina)
        .outerjoin(EmpleadoNomina, EmpleadoNomina.cedula_empleado == modelo.cedula_empleado)
        .order_by(modelo.nombre_empleado)
        .all()
    )
    hoy = date.today()
    resultado = []
    for informacion, nomina in filas:
        fila = fila_a_dict(informacion)
        fila["fecha_comienzo"] = nomina.fecha_comienzo if nomina else None
        fila["salario"] = nomina.salario if nomina else None
        fila["dias_trabajados"] = (hoy - nomina.fecha_comienzo).days if nomina else None
        resultado.append(fila)
    return resultado


async def obtener_nomina_completa(registro) -> Respuesta:
    try:
        lectura = await leer_todas(registro, Entidad.empleado_informacion, _consulta_nomina_completa)
    except SedesInaccesibles as e:
        return Respuesta(success=False, message=e.message, data=[], errorDetails=e.error_details())
    return Respuesta(
        success=True,
        message=f"Nómina de {len(lectura.filas)} empleados",
        data=lectura.filas,
        detalles=lectura.detalles(),
    )


async def crear_empleado_completo(registro, empleado_data: EmpleadoCreate) -> Respuesta:
    """
    Crea el empleado en orden estricto:
    1. valida la sede (NORTE o SUR)
    2. rechaza si la información ya existe en esa sede
    3. rechaza si la nómina ya existe en alguna réplica
    4. inserta la información en su sede (si falla, no se sigue)
    5. replica la nómina en todas las sedes
    """
    sede = normalizar_sede(empleado_data.sede_taller)
    cedula = empleado_data.cedula_empleado

    existentes = await leer_una(registro, Entidad.empleado_informacion, sede, consulta_por(cedula_empleado=cedula))
    if existentes:
        raise ClaveDuplicada(f"Ya existe un empleado con cédula {cedula} en la sede {sede.value}")

    nominas = await leer_todas(registro, Entidad.empleado_nomina, consulta_por(cedula_empleado=cedula))
    if nominas.filas:
        raise ClaveDuplicada(f"Ya existe una nómina con cédula {cedula}")

    informacion = {
        "cedula_empleado": cedula,
        "nombre_empleado": empleado_data.nombre_empleado,
        "sede_taller": sede.value,
    }
    modelo = _modelo_informacion(registro, sede)
    await en_sede(registro, sede, lambda db: insertar(informacion)(db, modelo))
    logger.info(f"Información del empleado {cedula} creada en {sede.value}")

    nomina = {"cedula_empleado": cedula, **empleado_data.model_dump(include=set(CAMPOS_NOMINA))}
    replicacion = await escribir_en_todas(registro, Entidad.empleado_nomina, insertar(nomina))

    if replicacion.overall_success:
        mensaje = f"Empleado creado en {sede.value}; nómina: {replicacion.mensaje('replicada')}"
    else:
        logger.error(f"Empleado {cedula} registrado en {sede.value} sin nómina en ninguna sede")
        mensaje = f"Empleado registrado en {sede.value} pero la nómina no se pudo replicar en ninguna sede"
    return Respuesta(
        success=replicacion.overall_success,
        message=mensaje,
        data={**informacion, **{campo: nomina[campo] for campo in CAMPOS_NOMINA}},
        detalles=replicacion.detalles(),
    )


async def transferir_empleado(
    registro,
    cedula: str,
    sede_destino: str,
    nombre_empleado: Optional[str] = None,
) -> Respuesta:
    """
    Mueve la información del empleado a otra sede: inserta en destino y luego elimina en
    origen. Si la eliminación falla se deshace la inserción; si eso también falla la
    respuesta indica que el registro quedó en ambas sedes.
    """
    destino = normalizar_sede(sede_destino)
    origen, fila = await localizar_empleado(registro, cedula)
    if origen is None:
        raise RegistroNoEncontrado(f"Empleado con cédula {cedula} no encontrado")
    if origen == destino:
        raise DatosInvalidos(f"El empleado {cedula} ya pertenece a la sede {destino.value}")

    en_destino = await leer_una(registro, Entidad.empleado_informacion, destino, consulta_por(cedula_empleado=cedula))
    if en_destino:
        raise ClaveDuplicada(f"Ya existe un empleado con cédula {cedula} en la sede {destino.value}")

    nueva = {**fila, "sede_taller": destino.value}
    if nombre_empleado:
        nueva["nombre_empleado"] = nombre_empleado
    modelo_origen = _modelo_informacion(registro, origen)
    modelo_destino = _modelo_informacion(registro, destino)
    filtro = {"cedula_empleado": cedula}

    await en_sede(registro, destino, lambda db: insertar(nueva)(db, modelo_destino))
    try:
        await en_sede(registro, origen, lambda db: eliminar(filtro)(db, modelo_origen))
    except FalloSede as fallo:
        logger.warning(f"Transferencia de {cedula}: no se pudo eliminar de {origen.value}, revirtiendo")
        detalles = {origen.value: ResultadoSede(success=False, error=fallo.message, tipo_error=fallo.tipo)}
        try:
            await en_sede(registro, destino, lambda db: eliminar(filtro)(db, modelo_destino))
        except FalloSede as fallo_reversion:
            logger.error(f"Empleado {cedula} quedó registrado en {origen.value} y {destino.value}")
            detalles[destino.value] = ResultadoSede(
                success=False, error=fallo_reversion.message, tipo_error=fallo_reversion.tipo
            )
            mensaje = (
                f"Transferencia incompleta: el empleado {cedula} existe en {origen.value} y en "
                f"{destino.value}; elimine manualmente uno de los dos registros"
            )
        else:
            detalles[destino.value] = ResultadoSede(success=True, filas_afectadas=0)
            mensaje = f"No se pudo transferir el empleado {cedula}; permanece en {origen.value}"
        return Respuesta(success=False, message=mensaje, data=fila, detalles=detalles)

    logger.info(f"Empleado {cedula} transferido de {origen.value} a {destino.value}")
    return Respuesta(
        success=True,
        message=f"Empleado transferido de {origen.value} a {destino.value}",
        data=nueva,
        detalles={
            origen.value: ResultadoSede(success=True, filas_afectadas=1),
            destino.value: ResultadoSede(success=True, filas_afectadas=1),
        },
    )


async def actualizar_nomina(registro, cedula: str, nomina_data: NominaUpdate) -> Respuesta:
    valores = nomina_data.model_dump()
    replicacion = await escribir_en_todas(
        registro, Entidad.empleado_nomina, actualizar({"cedula_empleado": cedula}, valores)
    )
    if replicacion.overall_success and replicacion.filas_afectadas == 0:
        raise RegistroNoEncontrado(f"Nómina del empleado {cedula} no encontrada en ninguna sede")
    return Respuesta(
        success=replicacion.overall_success,
        message=replicacion.mensaje("Nómina actualizada"),
        data={"cedula_empleado": cedula, **valores},
        detalles=replicacion.detalles(),
    )


async def actualizar_empleado(registro, cedula: str, empleado_data: EmpleadoUpdate) -> Respuesta:
    sede, fila = await localizar_empleado(registro, cedula)
    if sede is None:
        raise RegistroNoEncontrado(f"Empleado con cédula {cedula} no encontrado")

    cambios = empleado_data.model_dump(exclude_none=True)
    nuevo_nombre = cambios.get("nombre_empleado")
    mensajes = []

    if "sede_taller" in cambios and normalizar_sede(cambios["sede_taller"]) != sede:
        transferencia = await transferir_empleado(registro, cedula, cambios["sede_taller"], nuevo_nombre)
        if not transferencia.success:
            return transferencia
        fila = transferencia.data
        mensajes.append(transferencia.message)
    elif nuevo_nombre:
        modelo = _modelo_informacion(registro, sede)
        await en_sede(
            registro, sede,
            lambda db: actualizar({"cedula_empleado": cedula}, {"nombre_empleado": nuevo_nombre})(db, modelo),
        )
        fila = {**fila, "nombre_empleado": nuevo_nombre}
        mensajes.append(f"Información actualizada en {sede.value}")

    nomina = {campo: cambios[campo] for campo in CAMPOS_NOMINA if campo in cambios}
    detalles = None
    success = True
    if nomina:
        replicacion = await escribir_en_todas(
            registro, Entidad.empleado_nomina, actualizar({"cedula_empleado": cedula}, nomina)
        )
        success = replicacion.overall_success
        detalles = replicacion.detalles()
        mensajes.append(f"nómina: {replicacion.mensaje('actualizada')}")
        fila = {**fila, **nomina}

    if not mensajes:
        raise DatosInvalidos("No se indicó ningún campo para actualizar")
    return Respuesta(success=success, message="; ".join(mensajes), data=fila, detalles=detalles)


async def eliminar_empleado(registro, cedula: str) -> Respuesta:
    """
    Elimina la información en cada sede que la tenga (tras una transferencia incompleta
    puede estar en dos) y luego la nómina en todas las réplicas.

    Si alguna sede de fragmentos no responde no se elimina nada: la información podría
    estar en ella y la nómina quedaría borrada con un fragmento huérfano.
    """
    filtro = {"cedula_empleado": cedula}
    busqueda = await buscar_en_fragmentos(registro, Entidad.empleado_informacion, consulta_por(**filtro))
    if not busqueda.completa:
        fallo = busqueda.primer_fallo()
        logger.warning(f"Eliminación del empleado {cedula} cancelada: la sede {fallo.sede.value} no responde")
        raise fallo

    sedes_informacion = list(busqueda.encontradas)
    for sede in sedes_informacion:
        modelo = _modelo_informacion(registro, sede)
        await en_sede(registro, sede, lambda db: eliminar(filtro)(db, modelo))
        logger.info(f"Información del empleado {cedula} eliminada de {sede.value}")

    replicacion = await escribir_en_todas(registro, Entidad.empleado_nomina, eliminar(filtro))
    if not sedes_informacion and replicacion.overall_success and replicacion.filas_afectadas == 0:
        raise RegistroNoEncontrado(f"Empleado con cédula {cedula} no encontrado")

    mensajes = []
    if sedes_informacion:
        mensajes.append(f"Información eliminada de {', '.join(s.value for s in sedes_informacion)}")
    mensajes.append(f"nómina: {replicacion.mensaje('eliminada')}")
    return Respuesta(
        success=replicacion.overall_success,
        message="; ".join(mensajes),
        data={
            "cedula_empleado": cedula,
            "sedes_informacion": [sede.value for sede in sedes_informacion],
        },
        detalles=replicacion.detalles(),
    )
