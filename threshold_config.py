# threshold_config.py

# --- Tolerance Bands ---
# A value outside [min, max] is a 'warning'.
# A value below min * 0.9 or above max * 1.1 is 'critical'.
# The band only applies to the critical level.
CRITICAL_MIN_FACTOR = 0.9
CRITICAL_MAX_FACTOR = 1.1

# --- Default Site Thresholds ---
# Applied to every new mining site and restored by the admin "restore defaults" action.
# None means the parameter is unbounded on that side.

# pH: acceptable 6.5 to 8.5
PH_MIN = 6.5
PH_MAX = 8.5

# Temperature (°C): acceptable 10 to 30
TEMP_MIN = 10.0
TEMP_MAX = 30.0

# Dissolved oxygen (mg/L): at least 5
DO_MIN = 5.0

# Conductivity (μS/cm): at most 800
CONDUCTIVITY_MAX = 800.0

# Turbidity (NTU): at most 5
TURBIDITY_MAX = 5.0

DEFAULT_THRESHOLDS = {
    'pH': {'min': PH_MIN, 'max': PH_MAX},
    'temperature': {'min': TEMP_MIN, 'max': TEMP_MAX},
    'dissolved_oxygen': {'min': DO_MIN, 'max': None},
    'conductivity': {'min': None, 'max': CONDUCTIVITY_MAX},
    'turbidity': {'min': None, 'max': TURBIDITY_MAX},
}

# --- Measured Parameters ---
# Every numeric field accepted by the data-entry form. Thresholds may be
# configured for any of these, not only the five defaults above.
PHYSICO_CHEMICAL = [
    'temperature', 'pH', 'conductivity', 'dissolved_oxygen', 'turbidity',
    'salinity', 'nitrates', 'nitrites', 'ammonium', 'phosphates', 'suspended_solids',
]
BIOLOGICAL = ['fecal_coliforms', 'e_coli', 'ibgn']
HEAVY_METALS = ['lead', 'mercury', 'arsenic', 'cadmium', 'chromium', 'copper', 'zinc']
OTHER_CHEMICALS = ['hydrocarbons', 'organic_solvents', 'pesticides']

KNOWN_PARAMETERS = PHYSICO_CHEMICAL + BIOLOGICAL + HEAVY_METALS + OTHER_CHEMICALS
