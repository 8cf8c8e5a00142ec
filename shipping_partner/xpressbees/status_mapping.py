status_mapping = {
    "DRC": "booked",
    "PUD": "pickup pending",
    "PKD": "in transit",
    "IT": "in transit",
    "RAD": "in transit",
    "OFD": "out for delivery",
    "DLVD": "delivered",
    "UD": "NDR",
    "RTO": "RTO initiated",
    "RTO-IT": "RTO in transit",
    "RTD": "RTO delivered",
    "LOST": "lost",
    "CAN": "cancelled",
}
