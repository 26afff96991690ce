"""Centralised selectors for the Floriday Explorer sign-in, filter and listing flows."""

# ==== SIGN-IN ====
LOGIN_URL = "https://idm.floriday.io/"
EXPLORER_URL = "https://customers.floriday.io/explorer/overview"
LOGIN_IDENTIFIER = "input#identifier"
LOGIN_NEXT = 'button:has-text("Next")'
LOGIN_PASSCODE = 'input[name="credentials.passcode"]'
LOGIN_VERIFY = 'button:has-text("Verify")'

# ==== PURCHASE VIEW ====
PURCHASE_TAB = 'button.MuiTab-root:has-text("Purchase")'
FILTER_PANEL_OPEN = "div.css-1qo59uw-toolbarItem > button.css-17mby96-button"
FILTER_PANEL_CLOSE = (
    "button.MuiButtonBase-root.MuiIconButton-root.MuiIconButton-sizeMedium.css-dk99c2"
)
SEARCH_BUTTON = 'button[data-test="explorer-filter-search-button"]'
PAGE_SIZE_DROPDOWN = "select.css-hh3ke9-pageSizeDropDownList"

# ==== FILTER PANEL ====
ACCORDION = "div.MuiAccordion-root"
ACCORDION_LABEL = "span"
ACCORDION_COLLAPSE = "div.MuiCollapse-root"
ACCORDION_COLLAPSED_CLASS = "MuiCollapse-hidden"
ACCORDION_SUMMARY = "button.MuiAccordionSummary-root"
CHECKBOX = 'input[type="checkbox"]'
SUPPLIER_COMBO = 'div[data-test="supplier-filters-supplier-combo-box"]'
TOGGLE_BUTTON_SELECTED_CLASS = "css-mtautz-button-selected"

# ==== LISTING (product grid) ====
GRID = "div.css-2qghvq-gridContainer"
# Direct children only; placeholder nodes carry a data-test attribute.
ITEM = "div.css-2qghvq-gridContainer > div:not([data-test])"
NEXT_PAGE = 'button[aria-label="Go to next page"]'

# ==== ITEM FIELDS (scoped to one item) ====
IMAGE = ".css-16275sc-imageContainer img"
DETAILS = ".css-dcgd6i-itemDetails"
PRICE = "div.MuiBox-root.css-nicbzb"
PACKING = 'div[style*="white-space: nowrap"] > div'
QUANTITY = "div.MuiBox-root.css-18biwo"
FARM = "div.css-xfjc11-root"
FARM_IMAGE = "img"
CHARACTERISTIC_VALUES = "div.css-1cvv3s4-characteristics div.css-1kukt2z-value span"
HELPER_SELECT = "div.MuiSelect-select.MuiSelect-standard.MuiInputBase-input.MuiInput-input"
HELPER_STACK = "div.MuiStack-root.css-1v3wv53"
HELPER_STACK_MAIN = "div"
HELPER_STACK_CHIP = "span.MuiChip-label"

# Selectors listed here are constant fragments rather than full CSS queries.
NON_SELECTOR_CONSTANTS = {
    "LOGIN_URL",
    "EXPLORER_URL",
    "ACCORDION_COLLAPSED_CLASS",
    "TOGGLE_BUTTON_SELECTED_CLASS",
}
