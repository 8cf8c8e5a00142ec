# defaults for zone classification, all values lowercase

DEFAULT_METRO_CITIES = [
    "mumbai",
    "delhi",
    "new delhi",
    "bangalore",
    "bengaluru",
    "kolkata",
    "chennai",
    "hyderabad",
    "pune",
    "ahmedabad",
]

# north east states and J&K are billed as special zones
DEFAULT_SPECIAL_ZONE_STATES = [
    "arunachal pradesh",
    "assam",
    "manipur",
    "meghalaya",
    "mizoram",
    "nagaland",
    "tripura",
    "sikkim",
    "jammu & kashmir",
    "jammu and kashmir",
    "ladakh",
]

DEFAULT_SPECIAL_ZONE_REGIONS = [
    "north east",
    "jammu & kashmir",
]
