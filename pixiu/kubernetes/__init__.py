"""Reading and summarising Kubernetes cluster nodes."""