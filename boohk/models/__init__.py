from boohk.models.user import User
from boohk.models.client import Client
from boohk.models.product import Product
from boohk.models.quotation import Quotation
from boohk.models.cost_estimate import CostEstimate
from boohk.models.proposal import Proposal, ProposalActivity
from boohk.models.booking import Booking
from boohk.models.collectible import Collectible
from boohk.models.job_order import JobOrder
from boohk.models.notification import Notification
from boohk.models.service_assignment import ServiceAssignment
from boohk.models.fleet import FleetVehicle
from boohk.models.chat import ChatConversation, ChatMessage
from boohk.models.company_file import CompanyFolder, CompanyFile
from boohk.models.report import Report

__all__ = [
    "User",
    "Client",
    "Product",
    "Quotation",
    "CostEstimate",
    "Proposal",
    "ProposalActivity",
    "Booking",
    "Collectible",
    "JobOrder",
    "Notification",
    "ServiceAssignment",
    "FleetVehicle",
    "ChatConversation",
    "ChatMessage",
    "CompanyFolder",
    "CompanyFile",
    "Report",
]
