status_mapping = {
    "shipment_created": "booked",
    "pickup_scheduled": "pickup pending",
    "pickup_complete": "in transit",
    "shipment_received_at_origin": "in transit",
    "shipment_in_transit": "in transit",
    "shipment_received_at_destination": "in transit",
    "shipment_out_for_delivery": "out for delivery",
    "shipment_delivered": "delivered",
    "shipment_undelivered_attempted": "NDR",
    "shipment_rto_created": "RTO initiated",
    "shipment_rto_in_transit": "RTO in transit",
    "shipment_rto_delivered": "RTO delivered",
    "shipment_lost": "lost",
    "shipment_cancelled": "cancelled",
}
