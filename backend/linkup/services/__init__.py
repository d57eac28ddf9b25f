# Services package init
"""
LinkUp Backend: Services Package
==================================

Business logic, one class per handler group:

    UserService: register, login, search, get_by_id
    LinkService: link, list_linked, unlink
    FileService: upload validation, storage and lookup

Instances are built once per app by AppContext.from_settings().
"""
