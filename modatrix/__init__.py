from modatrix import log

log.setup()
