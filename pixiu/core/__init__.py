"""Cloud, CI/CD, menu, role and policy services and the application object."""