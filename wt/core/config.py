import uuid
from wt.common.logger import log
from wt.core.models import AppSettings, TimeEntry


#region === Keys ===

OWNER_KEY = "owner-identity"

def entries_key(owner_id):
    return f"entries:{owner_id}"

def settings_key(owner_id):
    return f"settings:{owner_id}"

# Returns the per-installation owner token, generating and storing one the first time it's asked for.
def get_owner_id(store):
    owner_id = store.get(OWNER_KEY)
    if isinstance(owner_id, str) and owner_id:
        return owner_id
    owner_id = uuid.uuid4().hex
    store.set(OWNER_KEY, owner_id)
    log.info(f"No owner identity found, generated new owner '{owner_id}'.")
    return owner_id

#endregion === Keys ===

#region === Entries ===

# Loads the entry list for the given owner. Records that can't be parsed are skipped one by one so a single bad
# row doesn't take the whole history with it.
def load_entries(store, owner_id):
    raw = store.get(entries_key(owner_id))
    if raw is None:
        log.info(f"No stored entries for owner '{owner_id}', starting with an empty list.")
        return []
    if not isinstance(raw, list):
        log.warning(f"Stored entries for owner '{owner_id}' were not a list, ignoring them.")
        return []

    entries = []
    skipped = 0
    for record in raw:
        try:
            entries.append(TimeEntry.from_dict(record))
        except ValueError:
            skipped += 1
            log.warning(f"Skipping unreadable entry record for owner '{owner_id}'.", exc_info=True)
    if skipped:
        log.warning(f"Loaded {len(entries)} entries for owner '{owner_id}', skipped {skipped} unreadable records.")
    else:
        log.info(f"Successfully loaded {len(entries)} entries for owner '{owner_id}'.")
    return entries

def save_entries(store, owner_id, entries):
    store.set(entries_key(owner_id), [entry.to_dict() for entry in entries])
    log.info(f"Saved {len(entries)} entries for owner '{owner_id}'.")

# Empties the entry list for the owner. Settings are left alone.
def clear_entries(store, owner_id):
    store.set(entries_key(owner_id), [])
    log.info(f"Cleared all entries for owner '{owner_id}'.")

#endregion === Entries ===

#region === Settings ===

# Loads the settings record for the owner, filling in defaults for anything missing. When there's no record at all,
# a fresh one is built (dark mode seeded from `prefers_dark`) and written straight away.
def load_settings(store, owner_id, prefers_dark=None):
    raw = store.get(settings_key(owner_id))
    if not isinstance(raw, dict):
        if raw is not None:
            log.warning(f"Stored settings for owner '{owner_id}' were not an object, rebuilding defaults.")
        dark = bool(prefers_dark()) if prefers_dark is not None else False
        settings = AppSettings(dark_mode=dark, user_id=owner_id)
        save_settings(store, owner_id, settings)
        log.info(f"Created default settings for owner '{owner_id}' (dark mode {dark}).")
        return settings

    settings, defaulted = AppSettings.from_dict(raw)
    settings.user_id = owner_id
    if defaulted:
        log.warning(f"Loaded settings for owner '{owner_id}', but with missing values that were defaulted: {', '.join(defaulted)}")
    else:
        log.info(f"Successfully loaded settings for owner '{owner_id}'.")
    return settings

def save_settings(store, owner_id, settings):
    store.set(settings_key(owner_id), settings.to_dict())
    log.info(f"Saved settings for owner '{owner_id}'.")

#endregion === Settings ===
