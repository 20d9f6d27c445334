from .user import User
from .company import Company
from .role import Role, RolePermission

from .staff import Staff
from .staff_payment_config import StaffPaymentConfig
from .staff_evaluation import StaffEvaluation
from .staff_training import StaffTraining
from .staff_schedule import StaffAbsence, StaffLeaveBalance, StaffWorkSchedule

from .student import Student
from .student_anamnesis import StudentAnamnesis
from .student_note import StudentNote
from .documents import StaffDocument, StudentDocument

from .subscription_plans import SubscriptionPlan
from .student_subscription import StudentSubscription
from .payments import SubscriptionPayment, PaymentProof

from .exercises import LibraryExercise
from .training_plan import TrainingPlan, TrainingPlanDay, TrainingPlanExercise
from .nutrition_plans import NutritionPlan, NutritionPlanDay, NutritionPlanMeal
from .classes import Room, GymClass, ClassSchedule, ClassEnrollment

from .message import Message
from .notifications import Notification
from .password_reset import PasswordResetRequest

__all__ = [
    "User", "Company", "Role", "RolePermission",
    "Staff", "StaffPaymentConfig", "StaffEvaluation", "StaffTraining",
    "StaffWorkSchedule", "StaffAbsence", "StaffLeaveBalance",
    "Student", "StudentAnamnesis", "StudentNote", "StaffDocument", "StudentDocument",
    "SubscriptionPlan", "StudentSubscription", "SubscriptionPayment", "PaymentProof",
    "LibraryExercise", "TrainingPlan", "TrainingPlanDay", "TrainingPlanExercise",
    "NutritionPlan", "NutritionPlanDay", "NutritionPlanMeal",
    "Room", "GymClass", "ClassSchedule", "ClassEnrollment",
    "Message", "Notification", "PasswordResetRequest",
]
