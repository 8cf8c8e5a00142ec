# services
from shipping_partner.delhivery.delhivery import Delhivery, DelhiveryAir
from shipping_partner.xpressbees.xpressbees import Xpressbees
from shipping_partner.ekart.ekart import Ekart

courier_service_mapping = {
    "delhivery": Delhivery,
    "delhivery-air": DelhiveryAir,
    "xpressbees": Xpressbees,
    "ekart": Ekart,
}
