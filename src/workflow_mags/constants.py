from pathlib import Path

# ==================================================================================== #
# PROGRESS BAR
# ==================================================================================== #
# See supported colors at: https://www.w3schools.com/colors/colors_x11.asp

# Total character width of the progress bar text
DEFAULT_PROGRESS_TEXT_N: int = 65
# Color of the progress bar description text
DEFAULT_DESCRIPTION_STYLE: str = "white"
# Width of the progress bar
DEFAULT_BAR_WIDTH: int = 40
# Color of the filled/complete portion of the progress bar
DEFAULT_BAR_COLUMN_COMPLETE_STYLE: str = "honeydew2"
# Color used when the progress bar is finished
DEFAULT_FINISHED_STYLE: str = "dark_cyan"
# Color of the percentage complete text (e.g., "85%")
DEFAULT_PROGRESS_PERCENTAGE_STYLE: str = "honeydew2"
# Color of the "X of Y complete" text (e.g., "4 of 10")
DEFAULT_M_OF_N_COMPLETE_STYLE: str = "honeydew2"
# Color of the time elapsed display (e.g., "E: 00:01:25")
DEFAULT_TIME_ELAPSED_STYLE: str = "light_sky_blue1"

# ==================================================================================== #
# SETTINGS
# ==================================================================================== #
# Go up three levels (src/workflow_mags/constants.py -> repository root)
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "references" / "config.yaml"
DEFAULT_PROJECT_DIR = Path.cwd() / "project"
DEFAULT_FEATURE_TYPE = 'MAG'
LOGGER_NAME = 'workflow_mags'

# ==================================================================================== #
# TAXONOMY & GENOME QUALITY
# ==================================================================================== #
DEFAULT_FEATURE_ID_COLUMN = 'bin'
DEFAULT_CLASSIFICATION_COLUMN = 'classification'
DEFAULT_COMPLETENESS_COLUMN = 'completeness'
DEFAULT_CONTAMINATION_COLUMN = 'contamination'
DEFAULT_GENOME_SIZE_COLUMN = 'genome_size'
EXPECTED_GENOME_SIZE_COLUMN = 'expected_genome_size'

TAXONOMIC_RANKS = {
    'd': 'Domain',
    'p': 'Phylum',
    'c': 'Class',
    'o': 'Order',
    'f': 'Family',
    'g': 'Genus',
    's': 'Species'
}
UNCLASSIFIED = 'Unclassified'

# ==================================================================================== #
# METADATA
# ==================================================================================== #
DEFAULT_SAMPLE_ID_COLUMN = 'sample_id'
DEFAULT_STATION_COLUMN = 'station'
DEFAULT_PROVINCE_COLUMN = 'province'
DEFAULT_FRACTION_COLUMN = 'fraction'
DEFAULT_DEPTH_COLUMN = 'depth'

# Sample IDs look like "TARA_018_0.22-3_SRF": station, size fraction, depth layer
DEFAULT_SAMPLE_ID_SEPARATOR = '_'
DEFAULT_SAMPLE_ID_FIELDS = [
    DEFAULT_STATION_COLUMN, DEFAULT_FRACTION_COLUMN, DEFAULT_DEPTH_COLUMN
]
DEFAULT_STATION_REQUIRED_COLUMNS = [DEFAULT_PROVINCE_COLUMN]

# ==================================================================================== #
# HEATMAPS
# ==================================================================================== #
DEFAULT_TOP_N = 30
DEFAULT_CLUSTER_METHOD = 'average'
DEFAULT_CLUSTER_METRIC = 'euclidean'
DEFAULT_HEATMAP_COLORSCALE = 'viridis'

# ==================================================================================== #
# BETA DIVERSITY
# ==================================================================================== #
DEFAULT_METRIC = 'braycurtis'
DEFAULT_N_PCOA = None
DEFAULT_PERMUTATIONS = 999
DEFAULT_COLOR_COL = DEFAULT_PROVINCE_COLUMN
DEFAULT_SYMBOL_COL = DEFAULT_FRACTION_COLUMN

# ==================================================================================== #
# FEATURE ABUNDANCE PLOTS
# ==================================================================================== #
DEFAULT_N_FEATURE_PLOTS = 10
DEFAULT_X_COL = DEFAULT_DEPTH_COLUMN
DEFAULT_FACET_COL = DEFAULT_FRACTION_COLUMN
# Surface, deep chlorophyll maximum, mesopelagic
DEFAULT_CATEGORY_ORDERS = {DEFAULT_DEPTH_COLUMN: ['SRF', 'DCM', 'MES']}

# ==================================================================================== #
# FIGURES
# ==================================================================================== #
DEFAULT_HEIGHT = 1000
DEFAULT_WIDTH = 1100
DEFAULT_SAVE_AS = ['html']
DEFAULT_PALETTE = 'glasbey'
NAN_COLOR = 'rgba(0, 0, 0, 0)'
DEFAULT_PLACEHOLDER = 'unknown'
