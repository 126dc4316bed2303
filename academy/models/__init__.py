from .employee import Employee
from .admin import Admin
from .department import Department
from .scenario import Scenario
from .assessment import Assessment
# base and mixins are imported by the above as needed
