"""
Pipeline de reconciliación one-way: Airwallex -> PostgreSQL.

Este paquete está diseñado para ejecutarse como job (cron / CLI) o disparado
desde el API en un hilo aparte; el motor es síncrono.

Objetivos de diseño:
- Idempotencia: se puede ejecutar N veces sin duplicar entidades.
- Completitud: se recorre toda la paginación del recurso.
- Aislamiento: un registro inválido no aborta la corrida.
- Control total: mapeo/transformaciones/conflictos en código, por categoría.
"""
