class StateKeys:
    """Keys for data stored in ``st.session_state``."""

    LANG = "lang"
    DEFAULT_WIZARD_ID = "upload"


class DraftKeys:
    """Fixed identifiers of the persisted upload draft."""

    STORAGE_KEY = "currico_upload_draft"
    SERVER_DRAFT_TYPE = "material"
