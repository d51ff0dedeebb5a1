"""
Time and central-body constants of the mean element theories.

Each constant is preceded by a string giving its meaning, units and
source.
"""

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Number of seconds in a day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

"""
Julian Date of the SGP4 epoch origin (1949-12-31 00:00:00 UTC). Units: *days*

References:

1. D. Vallado, P. Crawford, R. Hujsak and T.S. Kelso, *Revisiting Spacetrack
   Report #3*, AIAA 2006-6753, 2006.
"""
JD_SGP4_ORIGIN = 2433281.5

# Earth Constants
"""
Earth's Gravitational constant [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_EARTH = 3.986004415e14  # [m^3/s^2] GGM05s Value

"""
Earth's equatorial radius. [m]

References:

1. GGM05s Gravity Model
"""
R_EARTH = 6.378136300e6  # [m] GGM05s Value

"""
Earth's first zonal harmonic. [dimensionless]

References:

1. GGM05s Gravity Model.
"""
J2_EARTH = 0.0010826358191967  # [] GGM05s value

# EIGEN-5C zonal field, the default field of the analytical theories
"""
Central attraction coefficient of the EIGEN-5C gravity field. [m^3/s^2]

References:

1. C. Foerste et al., *EIGEN-5C: the new GeoForschungsZentrum Potsdam /
   Groupe de Recherche de Geodesie Spatiale combined gravity field model*,
   2008.
"""
EIGEN5C_MU = 3.986004415e14

"""
Reference radius of the EIGEN-5C gravity field. [m]
"""
EIGEN5C_RADIUS = 6378136.46

"""
Un-normalized zonal coefficients C20..C60 of the EIGEN-5C field.
Index ``n`` holds C_n0; indices 0 and 1 are unused. [dimensionless]
"""
EIGEN5C_ZONALS = (
    0.0,
    0.0,
    -1.08262667355e-3,
    2.53265648533e-6,
    1.61962159137e-6,
    2.27296082869e-7,
    -5.40681239107e-7,
)

# WGS-72 constants used by SGP4
"""
Central attraction coefficient of the WGS-72 model used by SGP4. [m^3/s^2]

References:

1. D. Vallado et al., *Revisiting Spacetrack Report #3*, 2006.
"""
WGS72_MU = 3.986008e14

"""
Equatorial radius of the WGS-72 model used by SGP4. [m]
"""
WGS72_RADIUS = 6378135.0
