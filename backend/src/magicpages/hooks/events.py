"""Named lifecycle events fired by the site and the page editor."""

SITE_INIT = "Site.init"
SITE_READY = "Site.ready"

PAGES_SAVE_READY = "Pages.saveReady"
PAGES_SAVED = "Pages.saved"
PAGES_ADDED = "Pages.added"
PAGES_TRASHED = "Pages.trashed"

PAGE_CHANGED = "Page.changed"

EDIT_BUILD_FORM = "ProcessPageEdit.buildForm"
EDIT_BUILD_FORM_CONTENT = "ProcessPageEdit.buildFormContent"
EDIT_BUILD_FORM_SETTINGS = "ProcessPageEdit.buildFormSettings"
FORM_PROCESS_INPUT = "InputfieldForm.processInput"

# Events delivered while a page is being persisted
SAVE_EVENTS = (PAGES_SAVE_READY, PAGES_SAVED, PAGES_ADDED)
